"""Indented JSON rendering of decoded BSON documents."""

import base64
import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import Binary, Document, ObjectId, Regex, Timestamp, Value
from .types import ElementType, ErrorType, ProcessingError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_datetime(millis: int) -> Optional[str]:
    """
    Format epoch milliseconds as an ISO-8601 UTC string.

    Returns:
        ``YYYY-MM-DDTHH:MM:SS.mmmZ``, or None when the instant falls outside
        the years 1 to 9999
    """
    try:
        moment = EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return None
    return (f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
            f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
            f".{moment.microsecond // 1000:03d}Z")


class JSONRenderer:
    """
    Renders documents as indented JSON text.

    The layout matches ``json.dumps(obj, indent=2)``. Documents are written
    in their own iteration order, so an ordered document keeps repeated keys
    and encoding order. Values JSON cannot express natively use MongoDB
    extended JSON wrappers such as ``{"$oid": ...}``.
    """

    def __init__(self, indent: int = 2, ensure_ascii: bool = False,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the renderer.

        Args:
            indent: Spaces per nesting level
            ensure_ascii: Escape every non-ASCII character
            logger: Optional logger instance
        """
        if indent < 0:
            raise ValueError("indent must be non-negative")
        self.indent = indent
        self.ensure_ascii = ensure_ascii
        self.logger = logger or logging.getLogger(__name__)
        self._writers: Dict[ElementType, Callable[[Any, int], str]] = {
            ElementType.DOUBLE: self._render_double,
            ElementType.STRING: self._render_string,
            ElementType.DOCUMENT: self._render_document,
            ElementType.ARRAY: self._render_array,
            ElementType.BINARY: self._render_binary,
            ElementType.OBJECT_ID: self._render_object_id,
            ElementType.BOOLEAN: lambda flag, level: "true" if flag else "false",
            ElementType.DATETIME: self._render_datetime,
            ElementType.NULL: lambda _, level: "null",
            ElementType.REGEX: self._render_regex,
            ElementType.JAVASCRIPT: lambda code, level: self._wrap([("$code", self._quote(code))], level),
            ElementType.SYMBOL: lambda symbol, level: self._wrap([("$symbol", self._quote(symbol))], level),
            ElementType.INT32: self._render_integer,
            ElementType.TIMESTAMP: self._render_timestamp,
            ElementType.INT64: self._render_integer,
            ElementType.MIN_KEY: lambda _, level: self._wrap([("$minKey", "1")], level),
            ElementType.MAX_KEY: lambda _, level: self._wrap([("$maxKey", "1")], level),
        }

    def render(self, document: Document) -> str:
        """
        Render a top-level document.

        Raises:
            ProcessingError: NON_FINITE_NUMBER if a double is NaN or infinite
        """
        text = self._render_document(document, 0)
        self.logger.debug(f"Rendered document with {len(document)} fields into {len(text)} characters")
        return text

    def render_value(self, value: Value, level: int = 0) -> str:
        """Render a single value whose first line sits at ``level``."""
        return self._writers[value.kind](value.payload, level)

    def _container(self, opening: str, closing: str, parts: List[str], level: int) -> str:
        if not parts:
            return opening + closing
        inner = "\n" + " " * (self.indent * (level + 1))
        outer = "\n" + " " * (self.indent * level)
        return opening + inner + ("," + inner).join(parts) + outer + closing

    def _wrap(self, members: List[Tuple[str, str]], level: int) -> str:
        """Build an object from keys and values already rendered at ``level + 1``."""
        parts = [f"{self._quote(key)}: {text}" for key, text in members]
        return self._container("{", "}", parts, level)

    def _quote(self, text: str) -> str:
        return json.dumps(text, ensure_ascii=self.ensure_ascii)

    def _render_document(self, document: Document, level: int) -> str:
        return self._wrap(
            [(key, self.render_value(value, level + 1)) for key, value in document.items()],
            level
        )

    def _render_array(self, document: Document, level: int) -> str:
        parts = [self.render_value(value, level + 1) for value in document.values()]
        return self._container("[", "]", parts, level)

    def _render_double(self, number: float, level: int) -> str:
        if not math.isfinite(number):
            raise ProcessingError(
                f"Cannot represent {number!r} as a JSON number",
                ErrorType.NON_FINITE_NUMBER,
                context={"value": number}
            )
        return json.dumps(number)

    def _render_integer(self, number: int, level: int) -> str:
        return str(int(number))

    def _render_string(self, text: str, level: int) -> str:
        return self._quote(text)

    def _render_binary(self, binary: Binary, level: int) -> str:
        encoded = base64.b64encode(binary.data).decode("ascii")
        return self._wrap([
            ("$binary", self._quote(encoded)),
            ("$type", self._quote(f"{binary.subtype:02x}")),
        ], level)

    def _render_object_id(self, object_id: ObjectId, level: int) -> str:
        return self._wrap([("$oid", self._quote(object_id.hex))], level)

    def _render_datetime(self, millis: int, level: int) -> str:
        formatted = format_datetime(millis)
        if formatted is not None:
            return self._quote(formatted)
        number_long = self._wrap([("$numberLong", self._quote(str(millis)))], level + 1)
        return self._wrap([("$date", number_long)], level)

    def _render_regex(self, regex: Regex, level: int) -> str:
        body = self._wrap([
            ("pattern", self._quote(regex.pattern)),
            ("options", self._quote(regex.options)),
        ], level + 1)
        return self._wrap([("$regularExpression", body)], level)

    def _render_timestamp(self, timestamp: Timestamp, level: int) -> str:
        body = self._wrap([
            ("t", str(timestamp.time)),
            ("i", str(timestamp.increment)),
        ], level + 1)
        return self._wrap([("$timestamp", body)], level)
