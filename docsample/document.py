"""Immutable documents flowing between pipeline stages."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class Document(Mapping[str, Any]):
    """Read-only mapping of field names to values, plus a metadata slot.

    The random ranking value attached by sample stages lives outside the
    field mapping, so it never shadows or collides with an ordinary field.
    """

    __slots__ = ("_fields", "_rand_meta")

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        rand_meta: float | None = None,
        **kwargs: Any,
    ) -> None:
        data = dict(fields or {})
        data.update(kwargs)
        self._fields: dict[str, Any] = data
        self._rand_meta = None if rand_meta is None else float(rand_meta)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        # Field equality only; the ranking value is metadata.
        if isinstance(other, Document):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._rand_meta is None:
            return f"Document({self._fields!r})"
        return f"Document({self._fields!r}, rand_meta={self._rand_meta!r})"

    @property
    def has_rand_meta(self) -> bool:
        return self._rand_meta is not None

    @property
    def rand_meta(self) -> float:
        """Random ranking value attached by a sample stage."""
        if self._rand_meta is None:
            raise AttributeError("document has no random metadata value")
        return self._rand_meta

    def with_rand_meta(self, value: float) -> Document:
        """Return a copy of this document carrying ``value`` as its ranking."""
        doc = Document.__new__(Document)
        doc._fields = self._fields
        doc._rand_meta = float(value)
        return doc

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the ordinary fields."""
        return dict(self._fields)
