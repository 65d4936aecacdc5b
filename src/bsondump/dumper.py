"""Stream driver turning a buffer of BSON documents into JSON text."""

import io
import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Iterator, Optional, TextIO, Tuple, Union

from .cursor import ByteCursor
from .decoder import BSONDecoder, DEFAULT_MAX_DEPTH
from .error_handler import ErrorHandler
from .field_filter import FieldFilter
from .models import Document
from .profiler import PerformanceProfiler
from .renderer import JSONRenderer
from .types import DocumentVariant, DumpResult, ProcessingError

Buffer = Union[bytes, bytearray, memoryview]

# Documents between profiler samples
SAMPLE_INTERVAL = 1000


class BSONDumper:
    """
    Dumps concatenated BSON documents as indented JSON.

    Frames are processed strictly in input order: decode, drop protected
    fields, render, write, then move on by the frame's declared length. The
    first error aborts the run; whatever was already written stays written.
    """

    def __init__(self, include_txn: bool = False,
                 ordered: bool = False,
                 indent: int = 2,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 enable_profiling: bool = False,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the dumper.

        Args:
            include_txn: Keep top-level txn-revno and txn-queue fields
            ordered: Keep field order and repeated keys instead of collapsing
                duplicates into a mapping
            indent: Spaces per JSON nesting level
            max_depth: Maximum document nesting accepted by the decoder
            enable_profiling: Collect run metrics with the profiler
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.variant = DocumentVariant.ORDERED if ordered else DocumentVariant.COLLAPSING

        self.error_handler = ErrorHandler(self.logger)
        self.decoder = BSONDecoder(self.variant, max_depth=max_depth, logger=self.logger)
        self.field_filter = FieldFilter(include_protected=include_txn, logger=self.logger)
        self.renderer = JSONRenderer(indent=indent, logger=self.logger)
        self.profiler = PerformanceProfiler(self.logger) if enable_profiling else None

    def iter_documents(self, data: Buffer) -> Iterator[Document]:
        """
        Yield each filtered document in ``data``.

        Raises:
            ProcessingError: On the first malformed frame
        """
        for _, document in self._iter_frames(data):
            yield document

    def _iter_frames(self, data: Buffer) -> Iterator[Tuple[int, Document]]:
        cursor = ByteCursor(data)
        while not cursor.at_end:
            offset = cursor.offset
            try:
                document, _ = self.decoder.decode_document(cursor)
            except ProcessingError as e:
                e.context.setdefault("frame_offset", offset)
                raise
            yield offset, self.field_filter.apply(document)

    def dump(self, data: Buffer, out: TextIO) -> DumpResult:
        """
        Write every document in ``data`` to ``out`` as indented JSON.

        Each document is followed by a newline, written and flushed as soon
        as it is rendered.

        Args:
            data: Buffer of concatenated BSON documents
            out: Text stream receiving the JSON

        Returns:
            DumpResult with document and byte counts

        Raises:
            ProcessingError: If a document cannot be decoded or rendered; the
                error context carries ``documents_written``
        """
        documents_written = 0
        characters_written = 0

        profiling = (self.profiler.profile_operation("dump", len(data))
                     if self.profiler else nullcontext())
        with profiling as profiler:
            try:
                for offset, document in self._iter_frames(data):
                    try:
                        text = self.renderer.render(document)
                    except ProcessingError as e:
                        e.context.setdefault("frame_offset", offset)
                        raise
                    out.write(text)
                    out.write("\n")
                    out.flush()
                    documents_written += 1
                    characters_written += len(text) + 1
                    if profiler and documents_written % SAMPLE_INTERVAL == 0:
                        profiler.sample_performance()
            except ProcessingError as e:
                e.context.setdefault("documents_written", documents_written)
                raise
            finally:
                if profiler:
                    profiler.record_output(characters_written, documents_written)

        self.logger.info(f"Dumped {documents_written} documents from {len(data)} bytes "
                         f"({self.variant.value} documents)")
        return DumpResult(document_count=documents_written, bytes_read=len(data))

    def dumps(self, data: Buffer) -> str:
        """Return the JSON for every document in ``data`` as one string."""
        out = io.StringIO()
        self.dump(data, out)
        return out.getvalue()

    def read_file(self, path: Union[str, Path]) -> bytes:
        """
        Read a whole BSON file into memory.

        Raises:
            ProcessingError: FILESYSTEM if the file cannot be read
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise self.error_handler.create_filesystem_error(
                f"Cannot read {path}: {e.strerror or e}", str(path)
            ) from e
        self.logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def dump_file(self, path: Union[str, Path], out: TextIO) -> DumpResult:
        """Read ``path`` completely, then dump it to ``out``."""
        return self.dump(self.read_file(path), out)
