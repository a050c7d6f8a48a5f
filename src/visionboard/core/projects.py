"""Ongoing project service: lifecycle rules over the entity store."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import ValidationError

from visionboard.core import lifecycle
from visionboard.errors import InvalidInput, NotFound
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import parse_amount, require_text
from visionboard.models.project import Project, ProjectStatus, ProjectSummary
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = Project.entity

# Fields a plain edit may change. Stages, tasks and progress have their own paths.
EDITABLE_FIELDS = {
    "project_name",
    "client",
    "description",
    "start_date",
    "deadline",
    "project_value",
    "status",
    "color",
}


class ProjectService:
    """Create, mutate and summarize ongoing projects.

    Every mutation is load, apply, persist: one store update carrying only the
    changed fields, attempted once. No version check is made, so a concurrent
    writer's change to the same fields is silently overwritten.
    """

    def __init__(self, store: EntityStore, event_bus: EventBus) -> None:
        """Initialize ProjectService.

        Args:
            store: Entity store for persistence
            event_bus: Event bus for emitting events
        """
        self._store = store
        self._event_bus = event_bus

    async def create(
        self,
        *,
        project_name: str,
        client: str,
        description: str | None = None,
        start_date: date | None = None,
        deadline: date | None = None,
        project_value: Any = None,
        status: ProjectStatus | str = ProjectStatus.PLANNING,
        color: str | None = None,
    ) -> Project:
        """Create a project with the five-stage template and no tasks.

        Args:
            project_name: Project name (required, non-empty)
            client: Client name (required, non-empty)
            description: Optional free text
            start_date: Defaults to today
            deadline: Optional due date
            project_value: Number or numeric string; unparsable becomes 0
            status: Initial status (default: Planning)
            color: Display color tag

        Returns:
            The stored Project, with its assigned id

        Raises:
            InvalidInput: If a required field is empty or a value is invalid
        """
        project = lifecycle.new_project(
            project_name=project_name,
            client=client,
            description=description,
            start_date=start_date,
            deadline=deadline,
            project_value=project_value,
            status=status,
            color=color,
        )
        data = await self._store.create(ENTITY, project.to_storage())
        created = Project(**data)
        logger.info("Created project: %s (id=%s)", created.project_name, created.id)

        await self._event_bus.emit(
            EventType.PROJECT_CREATED,
            {"project_id": created.id, "project_name": created.project_name},
        )
        return created

    async def get(self, project_id: str) -> Project | None:
        data = await self._store.get(ENTITY, project_id)
        if not data:
            return None
        return Project(**data)

    async def require(self, project_id: str) -> Project:
        project = await self.get(project_id)
        if project is None:
            raise NotFound(ENTITY, project_id)
        return project

    async def list_projects(
        self, *, status: ProjectStatus | str | None = None, active_only: bool = False
    ) -> list[Project]:
        """List projects newest first.

        Args:
            status: Only projects with this status
            active_only: Exclude Completed projects
        """
        projects = [Project(**d) for d in await self._store.list(ENTITY, "-created_date")]
        if status is not None:
            projects = [p for p in projects if p.status == status]
        if active_only:
            projects = [p for p in projects if p.is_active]
        return projects

    async def update(self, project_id: str, **updates: Any) -> Project:
        """Edit plain fields (name, client, dates, value, status, color).

        Raises:
            InvalidInput: On unknown fields, empty required text or bad values
            NotFound: If the project does not exist
        """
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Cannot edit fields: {sorted(unknown)}")

        for key in ("project_name", "client"):
            if key in updates:
                updates[key] = require_text(updates[key], key)
        if "project_value" in updates:
            updates["project_value"] = parse_amount(updates["project_value"], field="project_value")

        fields = list(updates)
        current = await self.require(project_id)
        if "status" in updates:
            current = lifecycle.set_status(current, updates.pop("status"))
        try:
            updated = Project.model_validate({**current.model_dump(), **updates})
        except ValidationError as e:
            raise InvalidInput(str(e)) from e
        return await self._persist(updated, fields, EventType.PROJECT_UPDATED)

    async def delete(self, project_id: str) -> None:
        await self.require(project_id)
        await self._store.delete(ENTITY, project_id)
        logger.info("Deleted project: id=%s", project_id)
        await self._event_bus.emit(EventType.PROJECT_DELETED, {"project_id": project_id})

    # --- Stages ---

    async def toggle_stage(self, project_id: str, stage_index: int) -> Project:
        """Flip a stage and store the recomputed progress with it."""
        return await self._apply(
            project_id,
            lambda p: lifecycle.toggle_stage(p, stage_index),
            ["stages", "progress_percentage"],
            EventType.STAGE_TOGGLED,
            {"stage_index": stage_index},
        )

    async def set_stage_notes(self, project_id: str, stage_index: int, notes: str) -> Project:
        return await self._apply(
            project_id,
            lambda p: lifecycle.set_stage_notes(p, stage_index, notes),
            ["stages"],
            EventType.PROJECT_UPDATED,
        )

    async def set_progress(self, project_id: str, percentage: int) -> Project:
        return await self._apply(
            project_id,
            lambda p: lifecycle.set_progress_override(p, percentage),
            ["progress_percentage"],
            EventType.PROGRESS_OVERRIDDEN,
        )

    # --- Tasks ---

    async def add_task(
        self, project_id: str, text: str, due_date: date | None = None
    ) -> Project:
        require_text(text, "task")
        return await self._apply(
            project_id,
            lambda p: lifecycle.add_task(p, text, due_date),
            ["tasks"],
            EventType.TASK_ADDED,
        )

    async def toggle_task(self, project_id: str, task_index: int) -> Project:
        return await self._apply(
            project_id,
            lambda p: lifecycle.toggle_task(p, task_index),
            ["tasks"],
            EventType.TASK_TOGGLED,
            {"task_index": task_index},
        )

    async def delete_task(self, project_id: str, task_index: int) -> Project:
        return await self._apply(
            project_id,
            lambda p: lifecycle.delete_task(p, task_index),
            ["tasks"],
            EventType.TASK_DELETED,
            {"task_index": task_index},
        )

    # --- Read models ---

    async def summary(self, project_id: str, *, today: date | None = None) -> ProjectSummary:
        return lifecycle.derive_summary(await self.require(project_id), today)

    async def portfolio(self) -> dict[str, Any]:
        """Totals across all projects. Active means not Completed."""
        projects = await self.list_projects()
        active = [p for p in projects if p.is_active]
        by_status = Counter(p.status.value for p in projects)
        return {
            "total": len(projects),
            "active": len(active),
            "active_value": sum(p.project_value for p in active),
            "by_status": {s.value: by_status.get(s.value, 0) for s in ProjectStatus},
        }

    # --- Internals ---

    async def _apply(
        self,
        project_id: str,
        change: Callable[[Project], Project],
        fields: list[str],
        event: EventType,
        extra: dict[str, Any] | None = None,
    ) -> Project:
        current = await self.require(project_id)
        return await self._persist(change(current), fields, event, extra)

    async def _persist(
        self,
        project: Project,
        fields: list[str],
        event: EventType,
        extra: dict[str, Any] | None = None,
    ) -> Project:
        payload = {k: v for k, v in project.to_storage().items() if k in fields}
        data = await self._store.update(ENTITY, project.id, payload)
        stored = Project(**data)
        logger.info("Updated project %s: %s", stored.id, ", ".join(sorted(payload)))

        await self._event_bus.emit(
            event,
            {"project_id": stored.id, "changes": sorted(payload), **(extra or {})},
        )
        return stored
