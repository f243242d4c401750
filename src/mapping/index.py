"""Resource type to table name index."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping


class MappingIndex:
    """Maps resource types to sorted, de-duplicated table names.

    Keys keep their original casing; :meth:`lookup` falls back to a
    case-insensitive match.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]] | None = None) -> None:
        self._entries: dict[str, tuple[str, ...]] = {}
        self._folded: dict[str, str] = {}
        for resource_type, tables in (entries or {}).items():
            self.set(resource_type, tables)

    def set(self, resource_type: str, tables: Iterable[str]) -> None:
        self._entries[resource_type] = tuple(sorted(set(tables)))
        self._folded.setdefault(resource_type.lower(), resource_type)

    def get(self, resource_type: str) -> tuple[str, ...] | None:
        return self._entries.get(resource_type)

    def lookup(self, resource_type: str) -> tuple[str, ...] | None:
        exact = self._entries.get(resource_type)
        if exact is not None:
            return exact
        key = self._folded.get(resource_type.lower())
        return self._entries.get(key) if key is not None else None

    def resource_types(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        return iter(self._entries.items())

    def table_count(self) -> int:
        return sum(len(tables) for tables in self._entries.values())

    def __contains__(self, resource_type: object) -> bool:
        return isinstance(resource_type, str) and self.lookup(resource_type) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingIndex):
            return NotImplemented
        return self._entries == other._entries

    def to_dict(self) -> dict[str, list[str]]:
        return {resource_type: list(tables) for resource_type, tables in sorted(self._entries.items())}

    def __repr__(self) -> str:
        return f"MappingIndex({len(self._entries)} resource types, {self.table_count()} tables)"


__all__ = ["MappingIndex"]
