"""Tests for the command-line interface."""

import json
import struct
from click.testing import CliRunner
from bsondump import __version__
from bsondump.cli import main, resolve_input_path

EMPTY = b"\x05\x00\x00\x00\x00"


class TestCLI:
    """Tests for the bsondump command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_dump_file(self, bson_file):
        result = self.runner.invoke(main, ["--ordered", str(bson_file)])

        assert result.exit_code == 0
        assert result.stdout == '{\n  "a": 1,\n  "b": "x"\n}\n{}\n'

    def test_dump_file_collapsing(self, bson_file):
        result = self.runner.invoke(main, [str(bson_file)])

        assert result.exit_code == 0
        first, second = result.stdout.split("}\n", 1)
        assert json.loads(first + "}") == {"a": 1, "b": "x"}
        assert second == "{}\n"

    def test_missing_filename_is_usage_error(self):
        result = self.runner.invoke(main, [])

        assert result.exit_code == 2
        assert "FILENAME" in result.output

    def test_bson_suffix_is_tried(self, bson_file):
        result = self.runner.invoke(main, [str(bson_file.with_suffix(""))])

        assert result.exit_code == 0
        assert result.stdout.endswith("{}\n")

    def test_nonexistent_file(self, temp_dir):
        result = self.runner.invoke(main, [str(temp_dir / "nothing")])

        assert result.exit_code == 1
        assert "no such file" in result.output

    def test_txn_flag(self, temp_dir, txn_document):
        path = temp_dir / "txns.bson"
        path.write_bytes(txn_document)

        default = json.loads(self.runner.invoke(main, [str(path)]).stdout)
        included = json.loads(self.runner.invoke(main, ["--txn", str(path)]).stdout)

        assert "txn-revno" not in default
        assert included["txn-revno"] == 7

    def test_ordered_flag(self, temp_dir, frames):
        path = temp_dir / "dups.bson"
        path.write_bytes(frames.document(frames.int32("b", 1), frames.int32("a", 2), frames.int32("b", 3)))

        result = self.runner.invoke(main, [str(path), "--ordered"])

        assert result.exit_code == 0
        assert json.loads(result.stdout, object_pairs_hook=list) == [("b", 1), ("a", 2), ("b", 3)]

    def test_corrupt_file_keeps_earlier_output(self, temp_dir):
        path = temp_dir / "corrupt.bson"
        path.write_bytes(EMPTY + struct.pack("<i", 99) + b"\x00")

        result = self.runner.invoke(main, [str(path)])

        assert result.exit_code == 1
        assert result.stdout == "{}\n"
        assert "Error: Truncated" in result.stderr

    def test_check(self, bson_file):
        result = self.runner.invoke(main, ["--check", str(bson_file)])

        assert result.exit_code == 0
        assert result.stdout.strip() == f"2 documents, {bson_file.stat().st_size} bytes"

    def test_check_corrupt_file(self, temp_dir):
        path = temp_dir / "short.bson"
        path.write_bytes(struct.pack("<i", 2) + b"\x00")

        result = self.runner.invoke(main, ["--check", str(path)])

        assert result.exit_code == 1
        assert "Invalid document length 2" in result.output

    def test_profile_flag(self, bson_file):
        result = self.runner.invoke(main, ["--profile", str(bson_file)])

        assert result.exit_code == 0

    def test_version(self):
        result = self.runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_resolve_input_path(self, bson_file):
        assert resolve_input_path(bson_file) == bson_file
        assert resolve_input_path(bson_file.with_suffix("")) == bson_file
