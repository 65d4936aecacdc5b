"""BSON document decoder producing ``Value`` trees."""

import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from .cursor import ByteCursor
from .models import Binary, Document, ObjectId, Regex, Timestamp, Value, document_class
from .types import DocumentVariant, ElementType, ErrorType, ProcessingError

# Smallest valid document: int32 length plus the trailing NUL.
MIN_DOCUMENT_SIZE = 5
# Matches the nesting limit enforced by MongoDB itself.
DEFAULT_MAX_DEPTH = 100

OBJECT_ID_SIZE = 12
BINARY_SUBTYPE_OLD = 0x02


class BSONDecoder:
    """
    Decoder for length-prefixed BSON documents.

    Reads one document frame at a time from a ``ByteCursor`` and builds a
    fully resolved document of the configured variant, recursing into
    embedded documents and arrays.
    """

    def __init__(self, variant: DocumentVariant = DocumentVariant.COLLAPSING,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the decoder.

        Args:
            variant: Document representation to build
            max_depth: Maximum nesting of embedded documents and arrays
            logger: Optional logger instance
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.variant = variant
        self.max_depth = max_depth
        self.logger = logger or logging.getLogger(__name__)
        self._document_class = document_class(variant)
        self._readers: Dict[ElementType, Callable[[ElementType, ByteCursor, int], Value]] = {
            ElementType.DOUBLE: self._read_double,
            ElementType.STRING: self._read_string,
            ElementType.DOCUMENT: self._read_embedded,
            ElementType.ARRAY: self._read_array,
            ElementType.BINARY: self._read_binary,
            ElementType.OBJECT_ID: self._read_object_id,
            ElementType.BOOLEAN: self._read_boolean,
            ElementType.DATETIME: self._read_datetime,
            ElementType.NULL: self._read_empty,
            ElementType.REGEX: self._read_regex,
            ElementType.JAVASCRIPT: self._read_string,
            ElementType.SYMBOL: self._read_string,
            ElementType.INT32: self._read_int32,
            ElementType.TIMESTAMP: self._read_timestamp,
            ElementType.INT64: self._read_int64,
            ElementType.MIN_KEY: self._read_empty,
            ElementType.MAX_KEY: self._read_empty,
        }

    def decode(self, data: Union[bytes, bytearray, memoryview]) -> Document:
        """
        Decode the document that starts at the beginning of ``data``.

        Bytes after the first frame are ignored.

        Raises:
            ProcessingError: If the frame is malformed
        """
        document, _ = self.decode_document(ByteCursor(data))
        return document

    def decode_document(self, cursor: ByteCursor) -> Tuple[Document, int]:
        """
        Decode one document frame at the cursor position.

        Args:
            cursor: Cursor positioned on the frame's length prefix

        Returns:
            Tuple of (document, frame_length); the cursor is left just past
            the frame

        Raises:
            ProcessingError: If the frame is malformed
        """
        start = cursor.offset
        document, length = self._decode_frame(cursor, depth=1)
        self.logger.debug(f"Decoded {self.variant.value} document: offset={start}, "
                          f"length={length}, fields={len(document)}")
        return document, length

    def _decode_frame(self, cursor: ByteCursor, depth: int) -> Tuple[Document, int]:
        if depth > self.max_depth:
            raise ProcessingError(
                f"Document nesting exceeds {self.max_depth} levels at offset {cursor.offset}",
                ErrorType.NESTING_TOO_DEEP,
                context={"offset": cursor.offset, "max_depth": self.max_depth}
            )

        start = cursor.offset
        length = cursor.peek_int32()
        if length < MIN_DOCUMENT_SIZE:
            raise ProcessingError(
                f"Invalid document length {length} at offset {start}",
                ErrorType.INVALID_LENGTH,
                context={"offset": start, "length": length}
            )

        frame = cursor.sub_cursor(length)
        frame.take_int32()

        pairs: List[Tuple[str, Value]] = []
        while frame.remaining > 1:
            tag = frame.take_byte()
            if tag == 0:
                raise ProcessingError(
                    f"Document terminator at offset {frame.offset - 1} precedes "
                    f"the end of the frame starting at {start}",
                    ErrorType.MALFORMED_TERMINATOR,
                    context={"offset": frame.offset - 1, "frame_offset": start}
                )
            key = self._read_key(frame)
            pairs.append((key, self._read_value(tag, key, frame, depth)))

        if frame.remaining != 1 or frame.take_byte() != 0:
            raise ProcessingError(
                f"Document starting at offset {start} does not end with a NUL terminator",
                ErrorType.MALFORMED_TERMINATOR,
                context={"offset": frame.end - 1, "frame_offset": start}
            )

        return self._document_class.from_pairs(pairs), length

    def _read_key(self, frame: ByteCursor) -> str:
        offset = frame.offset
        try:
            return frame.take_cstring()
        except ProcessingError as e:
            raise ProcessingError(
                f"Invalid element key at offset {offset}: {e}",
                ErrorType.INVALID_KEY,
                context={"offset": offset}
            ) from e

    def _read_value(self, tag: int, key: str, frame: ByteCursor, depth: int) -> Value:
        try:
            kind = ElementType(tag)
        except ValueError:
            raise ProcessingError(
                f"Unknown element type 0x{tag:02x} for key {key!r} at offset {frame.offset}",
                ErrorType.UNKNOWN_TYPE,
                context={"offset": frame.offset, "tag": tag, "key": key}
            ) from None
        return self._readers[kind](kind, frame, depth)

    def _read_double(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(ElementType.DOUBLE, frame.take_double())

    def _read_string(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        # JAVASCRIPT and SYMBOL share the string layout
        return Value(kind, self._read_utf8(frame))

    def _read_utf8(self, frame: ByteCursor) -> str:
        offset = frame.offset
        length = frame.take_int32()
        if length < 1:
            raise ProcessingError(
                f"Invalid string length {length} at offset {offset}",
                ErrorType.INVALID_LENGTH,
                context={"offset": offset, "length": length}
            )
        raw = frame.take(length)
        if raw[-1] != 0:
            raise ProcessingError(
                f"String at offset {offset} is not NUL terminated",
                ErrorType.INVALID_VALUE,
                context={"offset": offset}
            )
        try:
            return raw[:-1].decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProcessingError(
                f"Invalid UTF-8 in string at offset {offset}: {e.reason}",
                ErrorType.INVALID_VALUE,
                context={"offset": offset}
            ) from e

    def _read_embedded(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        document, _ = self._decode_frame(frame, depth + 1)
        return Value(ElementType.DOCUMENT, document)

    def _read_array(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        document, _ = self._decode_frame(frame, depth + 1)
        return Value(ElementType.ARRAY, document)

    def _read_binary(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        offset = frame.offset
        length = frame.take_int32()
        if length < 0:
            raise ProcessingError(
                f"Invalid binary length {length} at offset {offset}",
                ErrorType.INVALID_LENGTH,
                context={"offset": offset, "length": length}
            )
        subtype = frame.take_byte()
        data = frame.take(length)
        if subtype == BINARY_SUBTYPE_OLD and length >= 4:
            inner = int.from_bytes(data[:4], "little", signed=True)
            if inner == length - 4:
                data = data[4:]
        return Value(ElementType.BINARY, Binary(subtype, data))

    def _read_object_id(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(ElementType.OBJECT_ID, ObjectId(frame.take(OBJECT_ID_SIZE)))

    def _read_boolean(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        offset = frame.offset
        flag = frame.take_byte()
        if flag not in (0, 1):
            raise ProcessingError(
                f"Invalid boolean byte 0x{flag:02x} at offset {offset}",
                ErrorType.INVALID_VALUE,
                context={"offset": offset}
            )
        return Value(ElementType.BOOLEAN, flag == 1)

    def _read_datetime(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(ElementType.DATETIME, frame.take_int64())

    def _read_empty(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(kind)

    def _read_regex(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        pattern = frame.take_cstring()
        options = frame.take_cstring()
        return Value(ElementType.REGEX, Regex(pattern, options))

    def _read_int32(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(ElementType.INT32, frame.take_int32())

    def _read_timestamp(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        increment = frame.take_uint32()
        seconds = frame.take_uint32()
        return Value(ElementType.TIMESTAMP, Timestamp(seconds, increment))

    def _read_int64(self, kind: ElementType, frame: ByteCursor, depth: int) -> Value:
        return Value(ElementType.INT64, frame.take_int64())
