"""Learning and development goal model."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import Field

from visionboard.models.base import StoredModel


class LearningCategory(StrEnum):
    TECHNICAL = "Technical Skills"
    BUSINESS = "Business & Marketing"
    DESIGN = "Design"
    PERSONAL = "Personal Development"
    INDUSTRY = "Industry Knowledge"


class LearningStatus(StrEnum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class LearningItem(StoredModel):
    entity = "LearningItem"

    title: str
    description: str = ""
    category: LearningCategory = LearningCategory.TECHNICAL
    status: LearningStatus = LearningStatus.NOT_STARTED
    progress_percentage: int = Field(default=0, ge=0, le=100)
    start_date: date | None = None
    target_date: date | None = None
    priority: Priority = Priority.MEDIUM
    notes: str = ""
