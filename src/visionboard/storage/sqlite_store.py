"""SQLite entity store: one JSON document table, WAL mode."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from visionboard.errors import StorageFailure
from visionboard.storage.base import EntityStore, sort_records

logger = logging.getLogger(__name__)


class SQLiteStore(EntityStore):
    """aiosqlite-backed store. Every backend error surfaces as StorageFailure."""

    def __init__(self, db_path: Path, *, wal_mode: bool = True) -> None:
        self.db_path = db_path
        self.wal_mode = wal_mode
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Create the database file and apply the schema."""
        if self._db is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._db = await aiosqlite.connect(str(self.db_path))
            self._db.row_factory = aiosqlite.Row
            if self.wal_mode:
                await self._db.execute("PRAGMA journal_mode=WAL")
            await self._db.executescript(_load_sql("entities.sql"))
            await self._db.commit()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot open store at {self.db_path}: {e}") from e
        logger.info("Initialized SQLite store at %s", self.db_path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("Store not initialized. Call initialize() first.")
        return self._db

    async def list(self, entity: str, sort: str | None = None) -> list[dict[str, Any]]:
        try:
            cursor = await self.db.execute(
                "SELECT * FROM entities WHERE entity = ? ORDER BY seq", (entity,)
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot list {entity}: {e}") from e
        return sort_records([(row["seq"], _row_to_dict(row)) for row in rows], sort)

    async def get(self, entity: str, entity_id: str) -> dict[str, Any] | None:
        try:
            cursor = await self.db.execute(
                "SELECT * FROM entities WHERE entity = ? AND id = ?", (entity, entity_id)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot read {entity} {entity_id}: {e}") from e
        return _row_to_dict(row) if row else None

    async def create(self, entity: str, fields: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(UTC).isoformat()
        entity_id = str(uuid.uuid4())[:8]
        data = _strip_managed(fields)
        try:
            await self.db.execute(
                """INSERT INTO entities (entity, id, data, created_date, updated_date)
                   VALUES (?, ?, ?, ?, ?)""",
                (entity, entity_id, json.dumps(data), now, now),
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot create {entity}: {e}") from e
        return {**data, "id": entity_id, "created_date": now, "updated_date": now}

    async def update(self, entity: str, entity_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        existing = await self.get(entity, entity_id)
        if existing is None:
            raise StorageFailure(f"Cannot update {entity} {entity_id}: no such record")

        data = {**_strip_managed(existing), **_strip_managed(fields)}
        now = datetime.now(UTC).isoformat()
        try:
            await self.db.execute(
                "UPDATE entities SET data = ?, updated_date = ? WHERE entity = ? AND id = ?",
                (json.dumps(data), now, entity, entity_id),
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot update {entity} {entity_id}: {e}") from e
        return {
            **data,
            "id": entity_id,
            "created_date": existing["created_date"],
            "updated_date": now,
        }

    async def delete(self, entity: str, entity_id: str) -> None:
        try:
            cursor = await self.db.execute(
                "DELETE FROM entities WHERE entity = ? AND id = ?", (entity, entity_id)
            )
            await self.db.commit()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot delete {entity} {entity_id}: {e}") from e
        if cursor.rowcount == 0:
            raise StorageFailure(f"Cannot delete {entity} {entity_id}: no such record")

    async def count(self, entity: str) -> int:
        try:
            cursor = await self.db.execute(
                "SELECT COUNT(*) FROM entities WHERE entity = ?", (entity,)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot count {entity}: {e}") from e
        return row[0] if row else 0

    async def get_stats(self) -> dict[str, Any]:
        try:
            cursor = await self.db.execute(
                "SELECT entity, COUNT(*) AS count FROM entities GROUP BY entity"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageFailure(f"Cannot read store stats: {e}") from e
        return {
            "entities": {row["entity"]: row["count"] for row in rows},
            "db_path": str(self.db_path),
        }


# --- Helpers ---


_MANAGED = ("id", "created_date", "updated_date")


def _load_sql(filename: str) -> str:
    """Load SQL file from the schema package."""
    schema_dir = Path(__file__).parent.parent / "schema"
    return (schema_dir / filename).read_text()


def _strip_managed(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in _MANAGED}


def _row_to_dict(row: aiosqlite.Row) -> dict[str, Any]:
    """Expand a stored row into its record dict."""
    return {
        **json.loads(row["data"]),
        "id": row["id"],
        "created_date": row["created_date"],
        "updated_date": row["updated_date"],
    }
