"""Visionboard data models."""

from visionboard.models.calendar import CalendarEvent, EventCategory
from visionboard.models.expense import Expense, ExpenseCategory, ExpenseSummary, Period
from visionboard.models.learning import LearningItem, LearningStatus
from visionboard.models.pipeline import LeadStage, PipelineLead, PipelineStats
from visionboard.models.project import (
    STAGE_TEMPLATE,
    Project,
    ProjectStatus,
    ProjectSummary,
    Stage,
    Task,
)
from visionboard.models.vision import Accomplishment, VisionProgress, WeeklyNote

__all__ = [
    "STAGE_TEMPLATE",
    "Accomplishment",
    "CalendarEvent",
    "EventCategory",
    "Expense",
    "ExpenseCategory",
    "ExpenseSummary",
    "LeadStage",
    "LearningItem",
    "LearningStatus",
    "Period",
    "PipelineLead",
    "PipelineStats",
    "Project",
    "ProjectStatus",
    "ProjectSummary",
    "Stage",
    "Task",
    "VisionProgress",
    "WeeklyNote",
]
