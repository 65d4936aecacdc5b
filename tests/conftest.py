"""Pytest configuration and fixtures."""

import pytest
import struct
import tempfile
from pathlib import Path


class Frames:
    """Builds raw BSON bytes element by element, including malformed ones."""

    @staticmethod
    def document(*elements: bytes) -> bytes:
        body = b"".join(elements)
        return struct.pack("<i", len(body) + 5) + body + b"\x00"

    @staticmethod
    def element(tag: int, key: str, payload: bytes = b"") -> bytes:
        return bytes([tag]) + key.encode("utf-8") + b"\x00" + payload

    @staticmethod
    def string_payload(text: str) -> bytes:
        raw = text.encode("utf-8")
        return struct.pack("<i", len(raw) + 1) + raw + b"\x00"

    @classmethod
    def double(cls, key: str, value: float) -> bytes:
        return cls.element(0x01, key, struct.pack("<d", value))

    @classmethod
    def string(cls, key: str, value: str) -> bytes:
        return cls.element(0x02, key, cls.string_payload(value))

    @classmethod
    def embedded(cls, key: str, document: bytes) -> bytes:
        return cls.element(0x03, key, document)

    @classmethod
    def array(cls, key: str, *elements: bytes) -> bytes:
        return cls.element(0x04, key, cls.document(*elements))

    @classmethod
    def binary(cls, key: str, subtype: int, data: bytes) -> bytes:
        return cls.element(0x05, key, struct.pack("<iB", len(data), subtype) + data)

    @classmethod
    def object_id(cls, key: str, raw: bytes) -> bytes:
        return cls.element(0x07, key, raw)

    @classmethod
    def boolean(cls, key: str, value: bool) -> bytes:
        return cls.element(0x08, key, b"\x01" if value else b"\x00")

    @classmethod
    def datetime(cls, key: str, millis: int) -> bytes:
        return cls.element(0x09, key, struct.pack("<q", millis))

    @classmethod
    def null(cls, key: str) -> bytes:
        return cls.element(0x0A, key)

    @classmethod
    def regex(cls, key: str, pattern: str, options: str) -> bytes:
        return cls.element(0x0B, key, pattern.encode() + b"\x00" + options.encode() + b"\x00")

    @classmethod
    def int32(cls, key: str, value: int) -> bytes:
        return cls.element(0x10, key, struct.pack("<i", value))

    @classmethod
    def timestamp(cls, key: str, time: int, increment: int) -> bytes:
        return cls.element(0x11, key, struct.pack("<II", increment, time))

    @classmethod
    def int64(cls, key: str, value: int) -> bytes:
        return cls.element(0x12, key, struct.pack("<q", value))


EMPTY_DOCUMENT = b"\x05\x00\x00\x00\x00"


@pytest.fixture
def frames():
    """Raw BSON builder."""
    return Frames


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def simple_document():
    """``{"a": 1, "b": "x"}`` encoded as int32 then string."""
    return Frames.document(Frames.int32("a", 1), Frames.string("b", "x"))


@pytest.fixture
def txn_document():
    """Document carrying mgo/txn bookkeeping fields at the top level and nested."""
    return Frames.document(
        Frames.string("_id", "machine-0"),
        Frames.int64("txn-revno", 7),
        Frames.array("txn-queue", Frames.string("0", "5a1b_2c3d")),
        Frames.embedded("life", Frames.document(Frames.int64("txn-revno", 3))),
    )


@pytest.fixture
def bson_file(temp_dir, simple_document):
    """File holding two consecutive documents."""
    path = temp_dir / "dump.bson"
    path.write_bytes(simple_document + EMPTY_DOCUMENT)
    return path
