"""Wiring of one store and event bus into every board service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from visionboard.config import Config
from visionboard.core.calendar import CalendarService
from visionboard.core.expenses import ExpenseService
from visionboard.core.learning import LearningService
from visionboard.core.pipeline import PipelineService
from visionboard.core.projects import ProjectService
from visionboard.core.vision import VisionProgressService
from visionboard.events.bus import EventBus
from visionboard.storage.base import EntityStore
from visionboard.storage.sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)


@dataclass
class Board:
    store: EntityStore
    config: Config = field(default_factory=Config)
    bus: EventBus = field(default_factory=EventBus)

    def __post_init__(self) -> None:
        self.projects = ProjectService(self.store, self.bus)
        self.pipeline = PipelineService(self.store, self.bus)
        self.calendar = CalendarService(self.store, self.bus)
        self.expenses = ExpenseService(self.store, self.bus)
        self.learning = LearningService(self.store, self.bus, self.calendar)
        self.vision = VisionProgressService(
            self.store, self.bus, revenue_goal=self.config.revenue_goal
        )

    @classmethod
    async def open(cls, config: Config, *, db_path: Path | None = None) -> Board:
        """Open the workspace database and build the services on it."""
        db_path = db_path or config.db_path
        store = SQLiteStore(db_path, wal_mode=config.wal_mode)
        await store.initialize()
        logger.info("Opened board at %s", db_path)
        return cls(store=store, config=config)

    async def close(self) -> None:
        await self.store.close()
