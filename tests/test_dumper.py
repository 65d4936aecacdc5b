"""Tests for the stream driver."""

import io
import json
import pytest
import struct
from bsondump.dumper import BSONDumper
from bsondump.models import OrderedDocument
from bsondump.types import ErrorType, ProcessingError

EMPTY = b"\x05\x00\x00\x00\x00"


class FlushRecorder(io.StringIO):
    """Text stream remembering what had been written at each flush."""

    def __init__(self):
        super().__init__()
        self.flushed = []

    def flush(self):
        self.flushed.append(self.getvalue())
        super().flush()


class TestBSONDumper:
    """Tests for BSONDumper class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.dumper = BSONDumper()

    def dump_error(self, data, dumper=None):
        out = io.StringIO()
        with pytest.raises(ProcessingError) as exc_info:
            (dumper or self.dumper).dump(data, out)
        return exc_info.value, out.getvalue()

    def test_two_empty_documents(self):
        out = io.StringIO()

        result = self.dumper.dump(EMPTY + EMPTY, out)

        assert out.getvalue() == "{}\n{}\n"
        assert result.document_count == 2
        assert result.bytes_read == 10

    def test_empty_input(self):
        out = io.StringIO()

        result = self.dumper.dump(b"", out)

        assert out.getvalue() == ""
        assert result.document_count == 0

    def test_simple_document(self, simple_document):
        assert BSONDumper(ordered=True).dumps(simple_document) == '{\n  "a": 1,\n  "b": "x"\n}\n'
        assert json.loads(self.dumper.dumps(simple_document)) == {"a": 1, "b": "x"}

    def test_documents_keep_input_order(self, frames):
        data = b"".join(frames.document(frames.int32("n", i)) for i in range(5))

        lines = self.dumper.dumps(data).split("}\n")

        assert [json.loads(chunk + "}")["n"] for chunk in lines if chunk] == [0, 1, 2, 3, 4]

    def test_txn_fields_removed_by_default(self, txn_document):
        rendered = json.loads(self.dumper.dumps(txn_document))

        assert rendered == {"_id": "machine-0", "life": {"txn-revno": 3}}

    def test_include_txn(self, txn_document):
        rendered = json.loads(BSONDumper(include_txn=True).dumps(txn_document))

        assert rendered["txn-revno"] == 7
        assert rendered["txn-queue"] == ["5a1b_2c3d"]

    def test_ordered_output(self, frames):
        data = frames.document(
            frames.int32("z", 1), frames.int32("a", 2), frames.int32("z", 3),
        )

        text = BSONDumper(ordered=True).dumps(data)

        assert json.loads(text, object_pairs_hook=list) == [("z", 1), ("a", 2), ("z", 3)]

    def test_collapsing_output(self, frames):
        data = frames.document(frames.int32("z", 1), frames.int32("z", 3))

        assert json.loads(self.dumper.dumps(data)) == {"z": 3}

    def test_iter_documents(self, simple_document, txn_document):
        documents = list(BSONDumper(ordered=True).iter_documents(simple_document + txn_document))

        assert len(documents) == 2
        assert all(isinstance(document, OrderedDocument) for document in documents)
        assert documents[1].keys() == ["_id", "life"]

    def test_truncated_trailing_frame(self, simple_document):
        data = simple_document + struct.pack("<i", 100) + b"\x00" * 3

        error, output = self.dump_error(data, BSONDumper(ordered=True))

        assert error.error_type == ErrorType.TRUNCATED
        assert output == '{\n  "a": 1,\n  "b": "x"\n}\n'
        assert error.context["documents_written"] == 1
        assert error.context["frame_offset"] == len(simple_document)

    def test_output_flushed_before_failure(self, simple_document):
        out = FlushRecorder()

        with pytest.raises(ProcessingError):
            self.dumper.dump(EMPTY + simple_document + b"\x05\x00", out)

        assert out.flushed == ["{}\n", out.getvalue()]
        assert out.getvalue().count("}\n") == 2

    def test_trailing_bytes_shorter_than_length_prefix(self):
        error, output = self.dump_error(EMPTY + b"\x05\x00")

        assert error.error_type == ErrorType.TRUNCATED
        assert output == "{}\n"

    def test_oversized_first_frame_writes_nothing(self):
        error, output = self.dump_error(struct.pack("<i", 64) + b"\x00" * 6 + EMPTY)

        assert error.error_type == ErrorType.TRUNCATED
        assert output == ""

    def test_unknown_type_aborts_before_document(self, frames):
        bad = frames.document(frames.int32("a", 1), frames.element(0x13, "d", bytes(16)))

        error, output = self.dump_error(EMPTY + bad + EMPTY)

        assert error.error_type == ErrorType.UNKNOWN_TYPE
        assert output == "{}\n"
        assert error.context["documents_written"] == 1

    def test_non_finite_number_aborts(self, frames):
        data = EMPTY + frames.document(frames.double("x", float("inf")))

        error, output = self.dump_error(data)

        assert error.error_type == ErrorType.NON_FINITE_NUMBER
        assert error.context["frame_offset"] == 5
        assert output == "{}\n"

    def test_dump_file(self, bson_file):
        out = io.StringIO()

        result = self.dumper.dump_file(bson_file, out)

        assert result.document_count == 2
        assert out.getvalue().endswith("}\n{}\n")

    def test_read_missing_file(self, temp_dir):
        with pytest.raises(ProcessingError) as exc_info:
            self.dumper.read_file(temp_dir / "absent.bson")

        assert exc_info.value.error_type == ErrorType.FILESYSTEM

    def test_accepts_bytearray(self, simple_document):
        assert self.dumper.dumps(bytearray(simple_document)) == self.dumper.dumps(simple_document)

    def test_profiling(self, simple_document):
        dumper = BSONDumper(enable_profiling=True)

        dumper.dumps(simple_document + EMPTY)

        metrics = dumper.profiler.last_metrics
        assert metrics.operation_name == "dump"
        assert metrics.documents_written == 2
        assert metrics.input_size == len(simple_document) + 5
        assert metrics.memory_peak_mb > 0

    def test_profiling_records_partial_runs(self, simple_document):
        dumper = BSONDumper(enable_profiling=True)

        with pytest.raises(ProcessingError):
            dumper.dumps(simple_document + b"\x01")

        assert dumper.profiler.last_metrics.documents_written == 1
