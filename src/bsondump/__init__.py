"""
bsondump - Dump files of concatenated BSON documents as JSON.

Decodes each length-prefixed document, optionally drops the mgo/txn
bookkeeping fields and writes one indented JSON object per document.
"""

__version__ = "1.0.0"

from .decoder import BSONDecoder
from .dumper import BSONDumper
from .field_filter import FieldFilter, PROTECTED_FIELDS
from .models import CollapsingDocument, Document, OrderedDocument, Value
from .renderer import JSONRenderer
from .types import DocumentVariant, DumpResult, ElementType, ErrorType, ProcessingError

__all__ = [
    "BSONDecoder",
    "BSONDumper",
    "FieldFilter",
    "PROTECTED_FIELDS",
    "Document",
    "OrderedDocument",
    "CollapsingDocument",
    "Value",
    "JSONRenderer",
    "DocumentVariant",
    "DumpResult",
    "ElementType",
    "ErrorType",
    "ProcessingError",
]
