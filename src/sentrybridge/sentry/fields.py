"""
Inheritable, immutable field context for Sentry cores.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional


class FieldContext:
    """Key/value annotations carried by a core and inherited by its children.

    Every derivation copies the parent's map, so siblings derived from the
    same parent never observe each other's fields.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Optional[Mapping[str, Any]] = None) -> None:
        self._fields: dict[str, Any] = dict(fields or {})

    @property
    def fields(self) -> Mapping[str, Any]:
        return MappingProxyType(self._fields)

    def derive(self, additional: Optional[Mapping[str, Any]] = None) -> "FieldContext":
        merged = dict(self._fields)
        if additional:
            merged.update(additional)
        return FieldContext(merged)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldContext):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FieldContext({self._fields!r})"
