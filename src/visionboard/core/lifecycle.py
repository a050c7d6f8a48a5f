"""Project lifecycle rules.

Pure functions over :class:`Project`. Each returns an updated copy and never
mutates its argument. ``progress_percentage`` is stored, not computed: stage
toggles recompute it from the stage list, and a manual override writes it
directly until the next toggle overwrites it again.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from visionboard.errors import IndexOutOfRange, InvalidInput
from visionboard.models.base import parse_amount, require_text, round_half_up
from visionboard.models.project import (
    DEFAULT_COLOR,
    STAGE_TEMPLATE,
    VALID_STATUSES,
    Project,
    ProjectStatus,
    ProjectSummary,
    Stage,
    Task,
)


def new_project(
    *,
    project_name: str,
    client: str,
    description: str | None = None,
    start_date: date | None = None,
    deadline: date | None = None,
    project_value: Any = None,
    status: ProjectStatus | str = ProjectStatus.PLANNING,
    color: str | None = None,
    today: date | None = None,
) -> Project:
    """Build an unsaved project with the stage template and no tasks.

    Raises:
        InvalidInput: If project_name or client is empty, the value is
            negative, or the status is unknown.
    """
    return Project(
        project_name=require_text(project_name, "project_name"),
        client=require_text(client, "client"),
        description=description or None,
        start_date=start_date or today or date.today(),
        deadline=deadline,
        project_value=parse_amount(project_value, field="project_value"),
        status=_parse_status(status),
        color=color or DEFAULT_COLOR,
        progress_percentage=0,
        stages=[Stage(name=name) for name in STAGE_TEMPLATE],
        tasks=[],
    )


def stage_progress(stages: list[Stage]) -> int:
    """Percentage of completed stages, rounded half up. 0 for no stages."""
    if not stages:
        return 0
    completed = sum(1 for s in stages if s.completed)
    return round_half_up(100 * completed / len(stages))


def toggle_stage(project: Project, index: int) -> Project:
    """Flip one stage and recompute progress, discarding any override."""
    _check_index(project.stages, index, "stage")
    stages = [s.model_copy() for s in project.stages]
    stages[index] = stages[index].model_copy(update={"completed": not stages[index].completed})
    return project.model_copy(
        update={"stages": stages, "progress_percentage": stage_progress(stages)}
    )


def set_stage_notes(project: Project, index: int, notes: str) -> Project:
    _check_index(project.stages, index, "stage")
    stages = [s.model_copy() for s in project.stages]
    stages[index] = stages[index].model_copy(update={"notes": notes or ""})
    return project.model_copy(update={"stages": stages})


def set_progress_override(project: Project, percentage: int) -> Project:
    """Set progress by hand. Stages are untouched.

    Values outside 0..100 are rejected rather than clamped.
    """
    if isinstance(percentage, bool):
        raise InvalidInput(f"progress must be an integer, got {percentage!r}")
    try:
        value = int(percentage)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"progress must be an integer, got {percentage!r}") from e
    if not 0 <= value <= 100:
        raise InvalidInput(f"progress must be between 0 and 100, got {value}")
    return project.model_copy(update={"progress_percentage": value})


def add_task(project: Project, text: str, due_date: date | None = None) -> Project:
    task = Task(task=require_text(text, "task"), due_date=due_date)
    return project.model_copy(update={"tasks": [*project.tasks, task]})


def toggle_task(project: Project, index: int) -> Project:
    _check_index(project.tasks, index, "task")
    tasks = list(project.tasks)
    tasks[index] = tasks[index].model_copy(update={"completed": not tasks[index].completed})
    return project.model_copy(update={"tasks": tasks})


def delete_task(project: Project, index: int) -> Project:
    """Remove one task. Later tasks shift down by one index."""
    _check_index(project.tasks, index, "task")
    tasks = project.tasks[:index] + project.tasks[index + 1 :]
    return project.model_copy(update={"tasks": tasks})


def set_status(project: Project, status: ProjectStatus | str) -> Project:
    # Any status may follow any other; stages and progress are unaffected.
    return project.model_copy(update={"status": _parse_status(status)})


def days_until(deadline: date, today: date | None = None) -> int:
    """Whole days from today to the deadline, negative once overdue."""
    delta = deadline - (today or date.today())
    return math.ceil(delta.total_seconds() / 86400)


def derive_summary(project: Project, today: date | None = None) -> ProjectSummary:
    return ProjectSummary(
        completed_stages=project.completed_stages,
        total_stages=len(project.stages),
        completed_tasks=project.completed_tasks,
        total_tasks=len(project.tasks),
        days_until_deadline=days_until(project.deadline, today) if project.deadline else None,
    )


def _parse_status(status: ProjectStatus | str) -> ProjectStatus:
    if isinstance(status, ProjectStatus):
        return status
    if status not in VALID_STATUSES:
        raise InvalidInput(f"Invalid status: {status}. Must be one of {sorted(VALID_STATUSES)}")
    return ProjectStatus(status)


def _check_index(items: list, index: int, kind: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise IndexOutOfRange(kind, index, len(items))
