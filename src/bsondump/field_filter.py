"""Top-level field suppression for decoded documents."""

import logging
from typing import FrozenSet, Iterable, Optional

from .models import Document

# Transaction bookkeeping written by mgo/txn into every document it touches.
PROTECTED_FIELDS: FrozenSet[str] = frozenset({"txn-revno", "txn-queue"})


class FieldFilter:
    """
    Removes protected fields from the top level of a document.

    Only the outermost document is inspected; a ``txn-revno`` inside an
    embedded document or array is left alone.
    """

    def __init__(self, include_protected: bool = False,
                 protected_fields: Iterable[str] = PROTECTED_FIELDS,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the field filter.

        Args:
            include_protected: Keep protected fields instead of removing them
            protected_fields: Key names to remove
            logger: Optional logger instance
        """
        self.include_protected = include_protected
        self.protected_fields = frozenset(protected_fields)
        self.logger = logger or logging.getLogger(__name__)

    def apply(self, document: Document) -> Document:
        """Return ``document`` without protected top-level fields."""
        if self.include_protected:
            return document
        present = [key for key in self.protected_fields if key in document]
        if not present:
            return document
        self.logger.debug(f"Suppressing fields: {', '.join(sorted(present))}")
        return document.without_keys(self.protected_fields)
