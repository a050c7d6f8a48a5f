"""Ongoing project, stage and task models."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from visionboard.models.base import StoredModel


class ProjectStatus(StrEnum):
    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


VALID_STATUSES = {s.value for s in ProjectStatus}

# Created with every project, in this order, never reordered.
STAGE_TEMPLATE: tuple[str, ...] = (
    "Discovery & Planning",
    "Design",
    "Development",
    "Testing",
    "Deployment",
)

DEFAULT_COLOR = "#3b82f6"


class Stage(BaseModel):
    name: str
    completed: bool = False
    notes: str = ""


class Task(BaseModel):
    task: str
    completed: bool = False
    due_date: date | None = None


class Project(StoredModel):
    """A client project moving through the five delivery stages."""

    entity = "OngoingProject"

    project_name: str
    client: str
    description: str | None = None
    start_date: date | None = None
    deadline: date | None = None
    project_value: float = Field(default=0.0, ge=0)
    status: ProjectStatus = ProjectStatus.PLANNING
    color: str = DEFAULT_COLOR
    progress_percentage: int = Field(default=0, ge=0, le=100)
    stages: list[Stage] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)

    @property
    def completed_stages(self) -> int:
        return sum(1 for s in self.stages if s.completed)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def is_active(self) -> bool:
        return self.status != ProjectStatus.COMPLETED

    def to_response(self, *, detail: str = "summary") -> dict:
        data = {
            "_v": "1.0",
            "id": self.id,
            "project_name": self.project_name,
            "client": self.client,
            "status": self.status.value,
            "progress_percentage": self.progress_percentage,
            "project_value": self.project_value,
            "deadline": self.deadline.isoformat() if self.deadline else None,
        }
        if detail != "summary":
            data.update(
                {
                    "description": self.description,
                    "start_date": self.start_date.isoformat() if self.start_date else None,
                    "color": self.color,
                    "stages": [s.model_dump(mode="json") for s in self.stages],
                    "tasks": [t.model_dump(mode="json") for t in self.tasks],
                    "created_date": self.created_date.isoformat() if self.created_date else None,
                }
            )
        return data


class ProjectSummary(BaseModel):
    """Read-only stats projection of a project."""

    completed_stages: int
    total_stages: int
    completed_tasks: int
    total_tasks: int
    days_until_deadline: int | None = None
