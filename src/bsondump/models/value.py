"""Decoded BSON values."""

from dataclasses import dataclass
from typing import Any

from ..types import ElementType


@dataclass(frozen=True)
class Binary:
    """Binary payload with its BSON subtype."""

    subtype: int
    data: bytes

    def __post_init__(self):
        if not 0 <= self.subtype <= 0xFF:
            raise ValueError("subtype must fit in one byte")


@dataclass(frozen=True)
class ObjectId:
    """Twelve byte MongoDB object identifier."""

    raw: bytes

    def __post_init__(self):
        if len(self.raw) != 12:
            raise ValueError("ObjectId must be exactly 12 bytes")

    @property
    def hex(self) -> str:
        return self.raw.hex()

    def __str__(self) -> str:
        return self.hex


@dataclass(frozen=True)
class Regex:
    pattern: str
    options: str


@dataclass(frozen=True)
class Timestamp:
    """Replication timestamp: seconds since the epoch plus an ordinal."""

    time: int
    increment: int


@dataclass(frozen=True)
class Value:
    """
    A single decoded BSON value.

    ``kind`` is the element type tag that introduced the value and decides how
    ``payload`` is interpreted: a ``float`` for DOUBLE, ``str`` for STRING,
    JAVASCRIPT and SYMBOL, ``int`` for INT32, INT64 and DATETIME (epoch
    milliseconds), ``bool`` for BOOLEAN, a ``Document`` for DOCUMENT and
    ARRAY, the matching dataclass for BINARY, OBJECT_ID, REGEX and TIMESTAMP,
    and ``None`` for NULL, MIN_KEY and MAX_KEY.
    """

    kind: ElementType
    payload: Any = None

    @property
    def is_container(self) -> bool:
        return self.kind in (ElementType.DOCUMENT, ElementType.ARRAY)

    def to_python(self) -> Any:
        """Convert to plain Python objects; arrays become lists."""
        if self.kind == ElementType.ARRAY:
            return [value.to_python() for value in self.payload.values()]
        if self.kind == ElementType.DOCUMENT:
            return self.payload.to_python()
        return self.payload
