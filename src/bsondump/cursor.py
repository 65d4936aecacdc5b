"""Bounds-checked forward-only reader over a byte buffer."""

import struct
from typing import Optional, Union

from .types import ErrorType, ProcessingError

_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_INT64 = struct.Struct("<q")
_DOUBLE = struct.Struct("<d")


class ByteCursor:
    """
    Forward-only reader over ``data[offset:end]``.

    Every ``take_*`` call either returns the value and advances the offset or
    raises a TRUNCATED ``ProcessingError`` and leaves the offset where it was.
    A cursor returned by ``sub_cursor`` can never read past the end of the
    frame it was scoped to.
    """

    __slots__ = ("_buf", "_offset", "_end")

    def __init__(self, data: Union[bytes, bytearray, memoryview],
                 offset: int = 0, end: Optional[int] = None):
        self._buf = data.tobytes() if isinstance(data, memoryview) else data
        if end is None:
            end = len(self._buf)
        if not 0 <= offset <= end <= len(self._buf):
            raise ValueError(f"cursor bounds out of range: [{offset}, {end})")
        self._offset = offset
        self._end = end

    @property
    def offset(self) -> int:
        """Absolute position in the underlying buffer."""
        return self._offset

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._offset

    @property
    def at_end(self) -> bool:
        return self._offset >= self._end

    def _require(self, n: int, what: str) -> None:
        if n < 0 or n > self.remaining:
            raise ProcessingError(
                f"Truncated input: need {n} bytes for {what} at offset "
                f"{self._offset}, {self.remaining} available",
                ErrorType.TRUNCATED,
                context={"offset": self._offset, "needed": n,
                         "available": self.remaining}
            )

    def take(self, n: int) -> bytes:
        self._require(n, "raw bytes")
        start = self._offset
        self._offset += n
        return bytes(self._buf[start:self._offset])

    def take_byte(self) -> int:
        self._require(1, "a byte")
        value = self._buf[self._offset]
        self._offset += 1
        return value

    def _unpack(self, codec: struct.Struct, what: str):
        self._require(codec.size, what)
        value = codec.unpack_from(self._buf, self._offset)[0]
        self._offset += codec.size
        return value

    def take_int32(self) -> int:
        return self._unpack(_INT32, "int32")

    def take_uint32(self) -> int:
        return self._unpack(_UINT32, "uint32")

    def take_int64(self) -> int:
        return self._unpack(_INT64, "int64")

    def take_double(self) -> float:
        return self._unpack(_DOUBLE, "double")

    def peek_int32(self) -> int:
        self._require(_INT32.size, "int32")
        return _INT32.unpack_from(self._buf, self._offset)[0]

    def take_cstring(self) -> str:
        """
        Read a NUL-terminated UTF-8 string, consuming the terminator.

        Raises:
            ProcessingError: TRUNCATED if no terminator lies within bounds,
                INVALID_VALUE if the bytes are not valid UTF-8
        """
        start = self._offset
        nul = self._buf.find(b"\x00", start, self._end)
        if nul < 0:
            raise ProcessingError(
                f"Truncated input: unterminated string at offset {start}",
                ErrorType.TRUNCATED,
                context={"offset": start}
            )
        try:
            text = bytes(self._buf[start:nul]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProcessingError(
                f"Invalid UTF-8 in string at offset {start}: {e.reason}",
                ErrorType.INVALID_VALUE,
                context={"offset": start}
            ) from e
        self._offset = nul + 1
        return text

    def sub_cursor(self, length: int) -> "ByteCursor":
        """Scope a new cursor to the next ``length`` bytes and skip them here."""
        self._require(length, "a frame")
        start = self._offset
        self._offset += length
        return ByteCursor(self._buf, start, start + length)
