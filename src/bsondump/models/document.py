"""Ordered and collapsing document representations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..types import DocumentVariant
from .value import Value

Pair = Tuple[str, Value]


class Document(ABC):
    """
    Immutable decoded BSON document.

    Both variants answer the same read-only questions; they differ in how
    repeated keys are kept and in whether iteration order is meaningful.
    Filtering never mutates, it returns a new document of the same variant.
    """

    variant: DocumentVariant

    @classmethod
    @abstractmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "Document":
        """Build a document from ``(key, value)`` pairs in decode order."""
        pass

    @abstractmethod
    def items(self) -> List[Pair]:
        """Return the pairs in rendering order."""
        pass

    @abstractmethod
    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        pass

    @abstractmethod
    def without_keys(self, keys: Iterable[str]) -> "Document":
        """Return a copy without any top-level pair whose key is in ``keys``."""
        pass

    def keys(self) -> List[str]:
        return [key for key, _ in self.items()]

    def values(self) -> List[Value]:
        return [value for _, value in self.items()]

    def to_python(self) -> Dict[str, Any]:
        """Convert to a plain dict; a repeated key keeps its last value."""
        return {key: value.to_python() for key, value in self.items()}

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items())

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __repr__(self) -> str:
        body = ", ".join(f"{key!r}: {value!r}" for key, value in self.items())
        return f"{type(self).__name__}({{{body}}})"


class OrderedDocument(Document):
    """Keeps every pair, repeated keys included, in encoding order."""

    variant = DocumentVariant.ORDERED

    def __init__(self, pairs: Iterable[Pair] = ()):
        self._pairs: Tuple[Pair, ...] = tuple(pairs)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "OrderedDocument":
        return cls(pairs)

    def items(self) -> List[Pair]:
        return list(self._pairs)

    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        """Return the first value stored under ``key``."""
        for name, value in self._pairs:
            if name == key:
                return value
        return default

    def get_all(self, key: str) -> List[Value]:
        """Return every value stored under ``key`` in encoding order."""
        return [value for name, value in self._pairs if name == key]

    def without_keys(self, keys: Iterable[str]) -> "OrderedDocument":
        excluded = frozenset(keys)
        return OrderedDocument(
            (name, value) for name, value in self._pairs if name not in excluded
        )

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedDocument):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash((self.variant, self._pairs))


class CollapsingDocument(Document):
    """
    Key-unique mapping where a later duplicate replaces an earlier one.

    Iteration order is not part of the contract.
    """

    variant = DocumentVariant.COLLAPSING

    def __init__(self, fields: Optional[Dict[str, Value]] = None):
        self._fields: Dict[str, Value] = dict(fields or {})

    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "CollapsingDocument":
        fields: Dict[str, Value] = {}
        for key, value in pairs:
            fields[key] = value
        return cls(fields)

    def items(self) -> List[Pair]:
        return list(self._fields.items())

    def get(self, key: str, default: Optional[Value] = None) -> Optional[Value]:
        return self._fields.get(key, default)

    def without_keys(self, keys: Iterable[str]) -> "CollapsingDocument":
        excluded = frozenset(keys)
        return CollapsingDocument(
            {name: value for name, value in self._fields.items()
             if name not in excluded}
        )

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CollapsingDocument):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash((self.variant, frozenset(self._fields.items())))


def document_class(variant: DocumentVariant) -> type:
    """Return the document class implementing ``variant``."""
    if variant == DocumentVariant.ORDERED:
        return OrderedDocument
    return CollapsingDocument
