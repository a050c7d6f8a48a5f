"""Work calendar: events and the month grid they are laid out on."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from pydantic import ValidationError

from visionboard.errors import InvalidInput, NotFound
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import require_text
from visionboard.models.calendar import CalendarEvent, EventCategory
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = CalendarEvent.entity


class CalendarService:
    """Stores calendar events. Events copied from elsewhere keep no link back."""

    def __init__(self, store: EntityStore, event_bus: EventBus) -> None:
        self._store = store
        self._event_bus = event_bus

    async def schedule(
        self,
        *,
        title: str,
        on: date,
        start_time: str | None = None,
        end_time: str | None = None,
        category: EventCategory | str = EventCategory.CLIENT_WORK,
        description: str = "",
    ) -> CalendarEvent:
        try:
            event = CalendarEvent(
                title=require_text(title, "title"),
                date=on,
                start_time=start_time or None,
                end_time=end_time or None,
                category=category,
                description=description,
            )
        except ValidationError as e:
            raise InvalidInput(str(e)) from e

        data = await self._store.create(ENTITY, event.to_storage())
        created = CalendarEvent(**data)
        logger.info("Scheduled %s on %s (id=%s)", created.title, created.date, created.id)
        await self._event_bus.emit(
            EventType.EVENT_SCHEDULED, {"event_id": created.id, "date": created.date.isoformat()}
        )
        return created

    async def list_events(self) -> list[CalendarEvent]:
        return [CalendarEvent(**d) for d in await self._store.list(ENTITY, "-date")]

    async def events_for_day(self, day: date) -> list[CalendarEvent]:
        return [e for e in await self.list_events() if e.date == day]

    async def toggle_complete(self, event_id: str) -> CalendarEvent:
        data = await self._store.get(ENTITY, event_id)
        if data is None:
            raise NotFound(ENTITY, event_id)
        completed = not CalendarEvent(**data).completed
        updated = await self._store.update(ENTITY, event_id, {"completed": completed})
        await self._event_bus.emit(
            EventType.EVENT_UPDATED, {"event_id": event_id, "completed": completed}
        )
        return CalendarEvent(**updated)

    async def delete(self, event_id: str) -> None:
        if await self._store.get(ENTITY, event_id) is None:
            raise NotFound(ENTITY, event_id)
        await self._store.delete(ENTITY, event_id)
        logger.info("Deleted calendar event: id=%s", event_id)
        await self._event_bus.emit(EventType.EVENT_DELETED, {"event_id": event_id})


def month_grid(year: int, month: int) -> list[list[date]]:
    """Weeks covering a month, Sunday first.

    Starts on the Sunday on or before the 1st and ends on the Saturday on or
    after the last day, so every row has seven dates.
    """
    if not 1 <= month <= 12:
        raise InvalidInput(f"month must be 1..12, got {month}")
    first = date(year, month, 1)
    last = (date(year + (month == 12), month % 12 + 1, 1)) - timedelta(days=1)

    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)

    days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
    return [days[i : i + 7] for i in range(0, len(days), 7)]
