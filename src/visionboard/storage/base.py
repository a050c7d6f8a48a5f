"""Abstract entity-store interface.

One store serves every entity type, addressed by name ("OngoingProject",
"Expense", ...). Records are plain dicts; models live above this layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class EntityStore(ABC):
    """Generic list/create/update/delete contract per entity type."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare connections and schema."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def list(self, entity: str, sort: str | None = None) -> list[dict[str, Any]]:
        """List records. ``sort`` is a field name, prefixed with "-" for descending."""

    @abstractmethod
    async def get(self, entity: str, entity_id: str) -> dict[str, Any] | None:
        """Get one record, or None if absent."""

    @abstractmethod
    async def create(self, entity: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a record. Assigns id, created_date and updated_date."""

    @abstractmethod
    async def update(self, entity: str, entity_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into an existing record. Raises StorageFailure if absent."""

    @abstractmethod
    async def delete(self, entity: str, entity_id: str) -> None:
        """Remove a record. Raises StorageFailure if absent."""

    async def count(self, entity: str) -> int:
        return len(await self.list(entity))


def parse_sort(sort: str | None) -> tuple[str | None, bool]:
    """Split a sort string into (field, descending)."""
    if not sort:
        return None, False
    if sort.startswith("-"):
        return sort[1:], True
    return sort.lstrip("+"), False


def sort_records(
    records: list[tuple[int, dict[str, Any]]], sort: str | None
) -> list[dict[str, Any]]:
    """Order (sequence, record) pairs by a sort string.

    Ties fall back to insertion sequence in the same direction, so
    "-created_date" is newest-first even within one clock tick. Records
    missing the field always sort last.
    """
    field, descending = parse_sort(sort)
    if field is None:
        return [r for _, r in sorted(records, key=lambda p: p[0])]

    present = [p for p in records if p[1].get(field) is not None]
    missing = [p for p in records if p[1].get(field) is None]
    present.sort(key=lambda p: (p[1][field], p[0]), reverse=descending)
    missing.sort(key=lambda p: p[0], reverse=descending)
    return [r for _, r in present + missing]
