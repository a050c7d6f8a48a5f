"""Event type constants for visionboard."""

from enum import StrEnum


class EventType(StrEnum):
    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_DELETED = "project.deleted"

    STAGE_TOGGLED = "stage.toggled"
    PROGRESS_OVERRIDDEN = "progress.overridden"

    TASK_ADDED = "task.added"
    TASK_TOGGLED = "task.toggled"
    TASK_DELETED = "task.deleted"

    LEAD_CREATED = "lead.created"
    LEAD_UPDATED = "lead.updated"
    LEAD_DELETED = "lead.deleted"

    EVENT_SCHEDULED = "calendar.scheduled"
    EVENT_UPDATED = "calendar.updated"
    EVENT_DELETED = "calendar.deleted"

    EXPENSE_RECORDED = "expense.recorded"
    EXPENSE_DELETED = "expense.deleted"

    LEARNING_CREATED = "learning.created"
    LEARNING_UPDATED = "learning.updated"
    LEARNING_DELETED = "learning.deleted"

    VISION_UPDATED = "vision.updated"
