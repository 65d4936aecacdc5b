"""Data models for decoded BSON."""

from .value import Binary, ObjectId, Regex, Timestamp, Value
from .document import Document, OrderedDocument, CollapsingDocument, document_class

__all__ = [
    "Binary",
    "ObjectId",
    "Regex",
    "Timestamp",
    "Value",
    "Document",
    "OrderedDocument",
    "CollapsingDocument",
    "document_class",
]
