"""Shared test fixtures for visionboard."""

from __future__ import annotations

from pathlib import Path

import pytest

from visionboard.config import Config
from visionboard.core.board import Board
from visionboard.errors import StorageFailure
from visionboard.events.bus import EventBus
from visionboard.storage.memory_store import MemoryStore
from visionboard.storage.sqlite_store import SQLiteStore


class FailingStore(MemoryStore):
    """Memory store whose writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    async def create(self, entity, fields):
        if self.fail_writes:
            raise StorageFailure("backend unavailable")
        return await super().create(entity, fields)

    async def update(self, entity, entity_id, fields):
        if self.fail_writes:
            raise StorageFailure("backend unavailable")
        return await super().update(entity, entity_id, fields)


@pytest.fixture
def tmp_db(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
async def store(tmp_db: Path) -> SQLiteStore:
    s = SQLiteStore(tmp_db)
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
async def memory_store() -> MemoryStore:
    s = MemoryStore()
    await s.initialize()
    return s


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(workspace_path=tmp_path)


@pytest.fixture
def board(memory_store: MemoryStore, config: Config, event_bus: EventBus) -> Board:
    return Board(store=memory_store, config=config, bus=event_bus)


@pytest.fixture
def captured(event_bus: EventBus) -> list[dict]:
    """Every event emitted on the bus, in order."""
    events: list[dict] = []

    async def capture(event_type, data):
        events.append({"type": event_type, "data": data})

    event_bus.on_all(capture)
    return events
