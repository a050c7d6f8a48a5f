"""Calendar event model."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from visionboard.models.base import StoredModel


class EventCategory(StrEnum):
    CLIENT_WORK = "Client Work"
    SALES = "Sales"
    LEARNING = "Learning"
    MARKETING = "Marketing"
    ADMIN = "Admin"
    MEETING = "Meeting"
    PERSONAL = "Personal"


class CalendarEvent(StoredModel):
    entity = "CalendarEvent"

    title: str
    date: dt.date
    start_time: str | None = None  # "HH:MM"
    end_time: str | None = None
    category: EventCategory = EventCategory.CLIENT_WORK
    description: str = ""
    completed: bool = False
