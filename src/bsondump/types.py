"""Core type definitions for bsondump."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional


class ElementType(IntEnum):
    """BSON element type tags understood by the decoder."""
    DOUBLE = 0x01
    STRING = 0x02
    DOCUMENT = 0x03
    ARRAY = 0x04
    BINARY = 0x05
    OBJECT_ID = 0x07
    BOOLEAN = 0x08
    DATETIME = 0x09
    NULL = 0x0A
    REGEX = 0x0B
    JAVASCRIPT = 0x0D
    SYMBOL = 0x0E
    INT32 = 0x10
    TIMESTAMP = 0x11
    INT64 = 0x12
    MAX_KEY = 0x7F
    MIN_KEY = 0xFF


class DocumentVariant(Enum):
    """Enumeration of document representations."""
    ORDERED = "ordered"
    COLLAPSING = "collapsing"


class ErrorType(Enum):
    """Enumeration of error types."""
    TRUNCATED = "truncated"
    INVALID_LENGTH = "invalid-length"
    UNKNOWN_TYPE = "unknown-type"
    INVALID_KEY = "invalid-key"
    MALFORMED_TERMINATOR = "malformed-terminator"
    NON_FINITE_NUMBER = "non-finite-number"
    INVALID_VALUE = "invalid-value"
    NESTING_TOO_DEEP = "nesting-too-deep"
    FILESYSTEM = "filesystem"


@dataclass
class DumpResult:
    """Result of a dump operation."""
    document_count: int
    bytes_read: int


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]
    document_count: int = 0


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str
    partial_results: Optional[Any] = None


class ProcessingError(Exception):
    """Raised for every decode, filter and render failure."""

    def __init__(self, message: str, error_type: ErrorType,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_type = error_type
        self.context = context if context is not None else {}
