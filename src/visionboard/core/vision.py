"""VisionProgress singleton: business metrics, accomplishments, reflections."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from visionboard.errors import IndexOutOfRange, InvalidInput
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import require_text, round_half_up
from visionboard.models.vision import (
    METRIC_FIELDS,
    Accomplishment,
    GoalProgress,
    VisionProgress,
    WeeklyNote,
)
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = VisionProgress.entity


class VisionProgressService:
    """Owns the single VisionProgress row.

    The row is read as "first of list" and written create-if-absent, else
    update, so no call path can create a second row.
    """

    def __init__(
        self, store: EntityStore, event_bus: EventBus, *, revenue_goal: float = 100000.0
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self.revenue_goal = revenue_goal

    async def get(self) -> VisionProgress | None:
        rows = await self._store.list(ENTITY, "created_date")
        return VisionProgress(**rows[0]) if rows else None

    async def get_or_default(self) -> VisionProgress:
        return await self.get() or VisionProgress()

    async def save_metrics(self, **metrics: Any) -> VisionProgress:
        """Update revenue and client counters.

        Raises:
            InvalidInput: On unknown metric names or negative values
        """
        unknown = set(metrics) - set(METRIC_FIELDS)
        if unknown:
            raise InvalidInput(f"Unknown metrics: {sorted(unknown)}")
        for name, value in metrics.items():
            if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
                raise InvalidInput(f"{name} must be a non-negative number")
        return await self._save(metrics)

    async def add_accomplishment(
        self,
        *,
        title: str,
        description: str = "",
        on: date | None = None,
        category: str = "win",
    ) -> VisionProgress:
        entry = Accomplishment(
            title=require_text(title, "title"),
            description=description,
            date=on or date.today(),
            category=category,
        )
        current = await self.get_or_default()
        return await self._save(
            {"accomplishments": _dump([*current.accomplishments, entry])}
        )

    async def delete_accomplishment(self, index: int) -> VisionProgress:
        current = await self.get_or_default()
        return await self._save(
            {"accomplishments": _dump(_without(current.accomplishments, index, "accomplishment"))}
        )

    async def add_weekly_note(
        self,
        *,
        week_of: date | None = None,
        wins: str = "",
        challenges: str = "",
        next_week_focus: str = "",
    ) -> VisionProgress:
        """Record a weekly reflection. Newest notes come first."""
        note = WeeklyNote(
            week_of=week_of or date.today(),
            wins=wins,
            challenges=challenges,
            next_week_focus=next_week_focus,
        )
        current = await self.get_or_default()
        return await self._save({"weekly_notes": _dump([note, *current.weekly_notes])})

    async def delete_weekly_note(self, index: int) -> VisionProgress:
        current = await self.get_or_default()
        return await self._save(
            {"weekly_notes": _dump(_without(current.weekly_notes, index, "weekly note"))}
        )

    async def revenue_goal_progress(self) -> GoalProgress:
        current = await self.get_or_default()
        ratio = current.current_revenue / self.revenue_goal if self.revenue_goal else 0.0
        return GoalProgress(
            value=current.current_revenue,
            goal=self.revenue_goal,
            percentage=round_half_up(ratio * 100),
            bar_width=min(ratio * 100, 100.0),
        )

    async def _save(self, fields: dict[str, Any]) -> VisionProgress:
        current = await self.get()
        if current is None:
            data = await self._store.create(ENTITY, VisionProgress(**fields).to_storage())
            logger.info("Created vision progress record (id=%s)", data["id"])
        else:
            data = await self._store.update(ENTITY, current.id, fields)
        saved = VisionProgress(**data)
        await self._event_bus.emit(
            EventType.VISION_UPDATED, {"id": saved.id, "changes": sorted(fields)}
        )
        return saved


def _without(items: list, index: int, kind: str) -> list:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise IndexOutOfRange(kind, index, len(items))
    return items[:index] + items[index + 1 :]


def _dump(items: list) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]
