"""Singleton progress record: metrics, accomplishments, weekly reflections."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from visionboard.models.base import StoredModel


class Accomplishment(BaseModel):
    title: str
    description: str = ""
    date: dt.date | None = None
    category: str = "win"


class WeeklyNote(BaseModel):
    week_of: dt.date
    wins: str = ""
    challenges: str = ""
    next_week_focus: str = ""


METRIC_FIELDS = (
    "current_revenue",
    "monthly_revenue",
    "active_clients",
    "retainer_clients",
    "completed_projects",
)


class VisionProgress(StoredModel):
    entity = "VisionProgress"

    current_revenue: float = Field(default=0.0, ge=0)
    monthly_revenue: float = Field(default=0.0, ge=0)
    active_clients: int = Field(default=0, ge=0)
    retainer_clients: int = Field(default=0, ge=0)
    completed_projects: int = Field(default=0, ge=0)
    accomplishments: list[Accomplishment] = Field(default_factory=list)
    weekly_notes: list[WeeklyNote] = Field(default_factory=list)


class GoalProgress(BaseModel):
    value: float
    goal: float
    percentage: int  # may exceed 100
    bar_width: float  # capped at 100
