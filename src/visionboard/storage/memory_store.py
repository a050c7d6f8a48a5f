"""In-process entity store backed by dicts."""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import UTC, datetime
from itertools import count
from typing import Any

from visionboard.errors import StorageFailure
from visionboard.storage.base import EntityStore, sort_records

logger = logging.getLogger(__name__)


class MemoryStore(EntityStore):
    """Dict-backed store for tests and embedding. Returns deep copies."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
        self._seq = count()

    async def initialize(self) -> None:
        logger.debug("Initialized in-memory store")

    async def close(self) -> None:
        self._tables.clear()

    async def list(self, entity: str, sort: str | None = None) -> list[dict[str, Any]]:
        rows = self._tables.get(entity, {}).values()
        return [copy.deepcopy(r) for r in sort_records(list(rows), sort)]

    async def get(self, entity: str, entity_id: str) -> dict[str, Any] | None:
        row = self._tables.get(entity, {}).get(entity_id)
        return copy.deepcopy(row[1]) if row else None

    async def create(self, entity: str, fields: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(UTC).isoformat()
        record = {
            **copy.deepcopy(fields),
            "id": str(uuid.uuid4())[:8],
            "created_date": now,
            "updated_date": now,
        }
        self._tables.setdefault(entity, {})[record["id"]] = (next(self._seq), record)
        return copy.deepcopy(record)

    async def update(self, entity: str, entity_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        table = self._tables.get(entity, {})
        if entity_id not in table:
            raise StorageFailure(f"Cannot update {entity} {entity_id}: no such record")
        seq, record = table[entity_id]
        merged = {**record, **copy.deepcopy(fields)}
        merged["id"] = entity_id
        merged["created_date"] = record["created_date"]
        merged["updated_date"] = datetime.now(UTC).isoformat()
        table[entity_id] = (seq, merged)
        return copy.deepcopy(merged)

    async def delete(self, entity: str, entity_id: str) -> None:
        table = self._tables.get(entity, {})
        if table.pop(entity_id, None) is None:
            raise StorageFailure(f"Cannot delete {entity} {entity_id}: no such record")
