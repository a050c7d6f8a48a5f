"""Learning and development goals."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import ValidationError

from visionboard.core.calendar import CalendarService
from visionboard.errors import InvalidInput, NotFound
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import require_text
from visionboard.models.calendar import CalendarEvent, EventCategory
from visionboard.models.learning import LearningItem, LearningStatus
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = LearningItem.entity

EDITABLE_FIELDS = {
    "title",
    "description",
    "category",
    "status",
    "start_date",
    "target_date",
    "priority",
    "notes",
}


def status_for_progress(progress: int) -> LearningStatus:
    if progress == 100:
        return LearningStatus.COMPLETED
    if progress > 0:
        return LearningStatus.IN_PROGRESS
    return LearningStatus.NOT_STARTED


class LearningService:
    """Learning items, their progress, and scheduling study time."""

    def __init__(
        self, store: EntityStore, event_bus: EventBus, calendar: CalendarService
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._calendar = calendar

    async def create(self, *, title: str, **fields: Any) -> LearningItem:
        unknown = set(fields) - EDITABLE_FIELDS - {"progress_percentage"}
        if unknown:
            raise InvalidInput(f"Unknown fields: {sorted(unknown)}")
        item = _build(title=require_text(title, "title"), **fields)
        data = await self._store.create(ENTITY, item.to_storage())
        created = LearningItem(**data)
        logger.info("Created learning item: %s (id=%s)", created.title, created.id)
        await self._event_bus.emit(EventType.LEARNING_CREATED, {"item_id": created.id})
        return created

    async def require(self, item_id: str) -> LearningItem:
        data = await self._store.get(ENTITY, item_id)
        if data is None:
            raise NotFound(ENTITY, item_id)
        return LearningItem(**data)

    async def list_items(
        self, *, status: LearningStatus | str | None = None
    ) -> list[LearningItem]:
        items = [LearningItem(**d) for d in await self._store.list(ENTITY, "-created_date")]
        if status is not None and status != "all":
            items = [i for i in items if i.status == status]
        return items

    async def update(self, item_id: str, **updates: Any) -> LearningItem:
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Cannot edit fields: {sorted(unknown)}")
        if "title" in updates:
            updates["title"] = require_text(updates["title"], "title")
        current = await self.require(item_id)
        updated = _build(**{**current.model_dump(), **updates})
        return await self._write(item_id, updated, set(updates))

    async def update_progress(self, item_id: str, progress: int) -> LearningItem:
        """Set progress and derive status from it (0, partial, 100)."""
        if isinstance(progress, bool) or not isinstance(progress, int) or not 0 <= progress <= 100:
            raise InvalidInput(f"progress must be an integer 0..100, got {progress!r}")
        current = await self.require(item_id)
        updated = current.model_copy(
            update={"progress_percentage": progress, "status": status_for_progress(progress)}
        )
        return await self._write(item_id, updated, {"progress_percentage", "status"})

    async def delete(self, item_id: str) -> None:
        await self.require(item_id)
        await self._store.delete(ENTITY, item_id)
        logger.info("Deleted learning item: id=%s", item_id)
        await self._event_bus.emit(EventType.LEARNING_DELETED, {"item_id": item_id})

    async def stats(self) -> dict[str, int]:
        items = await self.list_items()
        return {
            "total": len(items),
            "in_progress": sum(1 for i in items if i.status == LearningStatus.IN_PROGRESS),
            "completed": sum(1 for i in items if i.status == LearningStatus.COMPLETED),
        }

    async def schedule(
        self,
        item_id: str,
        *,
        on: date,
        start_time: str = "09:00",
        end_time: str = "10:00",
        description: str | None = None,
    ) -> CalendarEvent:
        """Put a study session for an item on the calendar.

        The event is a copy of the item's title and description; later edits
        to the item do not reach it.
        """
        item = await self.require(item_id)
        return await self._calendar.schedule(
            title=item.title,
            on=on,
            start_time=start_time,
            end_time=end_time,
            category=EventCategory.LEARNING,
            description=item.description if description is None else description,
        )

    async def _write(self, item_id: str, item: LearningItem, fields: set[str]) -> LearningItem:
        payload = {k: v for k, v in item.to_storage().items() if k in fields}
        data = await self._store.update(ENTITY, item_id, payload)
        await self._event_bus.emit(
            EventType.LEARNING_UPDATED, {"item_id": item_id, "changes": sorted(payload)}
        )
        return LearningItem(**data)


def _build(**fields: Any) -> LearningItem:
    try:
        return LearningItem(**fields)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e
