"""FastMCP server with 6 board tools, 2 resources, 1 prompt."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from pydantic import Field

from visionboard.config import Config
from visionboard.core.board import Board
from visionboard.core.calendar import month_grid
from visionboard.errors import InvalidInput, VisionBoardError

logger = logging.getLogger(__name__)


def _json(data: dict[str, Any]) -> str:
    return json.dumps(data, default=str)


def _ok(data: dict[str, Any]) -> str:
    """Return a versioned JSON success response."""
    return _json({**data, "_v": "1.0"})


def _err(msg: str) -> str:
    """Return a versioned JSON error response."""
    return _json({"_v": "1.0", "error": msg})


def _date(value: str | None, name: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidInput(f"{name} must be YYYY-MM-DD, got {value!r}") from e


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json")


def _page(items: list[Any], limit: int | None, default: int) -> tuple[list[Any], int]:
    """Cut a list to one page; returns the page and the unpaged total."""
    return items[: limit or default], len(items)


def create_server(db_path: str, config: Config | None = None) -> FastMCP:
    """Create the FastMCP server over the board stored at db_path."""
    mcp = FastMCP("visionboard", version="0.1.0")

    state: dict[str, Any] = {}
    _lock = asyncio.Lock()

    async def _init() -> Board:
        async with _lock:
            if "init_failed" in state:
                raise RuntimeError(f"Board init previously failed for {db_path}")
            if "board" not in state:
                cfg = config or Config(workspace_path=Path(db_path).parent)
                try:
                    board = await Board.open(cfg, db_path=Path(db_path))
                except Exception as e:
                    state["init_failed"] = True
                    logger.error("Failed to open board: %s", e)
                    raise RuntimeError(f"Board init failed: {db_path}") from e
                state["board"] = board
        return state["board"]

    # ── vb_project ────────────────────────────────────────────

    @mcp.tool()
    async def vb_project(
        action: Annotated[
            Literal[
                "create", "get", "list", "update", "delete", "toggle_stage",
                "stage_notes", "set_progress", "add_task", "toggle_task",
                "delete_task", "summary", "portfolio",
            ],
            Field(description="Project action"),
        ],
        project_id: Annotated[str | None, Field(description="Project ID")] = None,
        project_name: Annotated[str | None, Field(description="Name (create, update)")] = None,
        client: Annotated[str | None, Field(description="Client (create, update)")] = None,
        description: Annotated[str | None, Field(description="Description")] = None,
        start_date: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        deadline: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        project_value: Annotated[str | None, Field(description="Value, e.g. 2500")] = None,
        status: Annotated[
            str | None,
            Field(description="Planning|In Progress|Review|Completed|On Hold"),
        ] = None,
        color: Annotated[str | None, Field(description="Display color")] = None,
        index: Annotated[int | None, Field(description="Stage or task index")] = None,
        notes: Annotated[str | None, Field(description="Stage notes")] = None,
        progress: Annotated[int | None, Field(description="Manual progress 0-100")] = None,
        task: Annotated[str | None, Field(description="Task text (add_task)")] = None,
        due_date: Annotated[str | None, Field(description="Task due date")] = None,
        active_only: Annotated[bool, Field(description="Skip Completed (list)")] = False,
        limit: Annotated[
            int | None, Field(description="Max results (list), defaults to list_limit", ge=1)
        ] = None,
    ) -> str:
        """Manage ongoing client projects: stages, tasks and progress."""
        board = await _init()
        projects = board.projects

        try:
            if action == "create":
                project = await projects.create(
                    project_name=project_name or "",
                    client=client or "",
                    description=description,
                    start_date=_date(start_date, "start_date"),
                    deadline=_date(deadline, "deadline"),
                    project_value=project_value,
                    status=status or "Planning",
                    color=color or board.config.default_project_color,
                )
                return _ok(project.to_response(detail="full"))

            if action == "list":
                items, total = _page(
                    await projects.list_projects(status=status, active_only=active_only),
                    limit,
                    board.config.list_limit,
                )
                return _ok(
                    {"count": len(items), "total": total, "projects": [p.to_response() for p in items]}
                )

            if action == "portfolio":
                return _ok(await projects.portfolio())

            if not project_id:
                return _err(f"project_id is required for {action}")

            if action == "get":
                return _ok((await projects.require(project_id)).to_response(detail="full"))

            if action == "summary":
                return _ok(_dump(await projects.summary(project_id)))

            if action == "delete":
                await projects.delete(project_id)
                return _ok({"deleted": project_id})

            if action == "update":
                updates: dict[str, Any] = {}
                for key, value in (
                    ("project_name", project_name),
                    ("client", client),
                    ("description", description),
                    ("project_value", project_value),
                    ("status", status),
                    ("color", color),
                ):
                    if value is not None:
                        updates[key] = value
                if start_date is not None:
                    updates["start_date"] = _date(start_date, "start_date")
                if deadline is not None:
                    updates["deadline"] = _date(deadline, "deadline")
                if not updates:
                    return _err("nothing to update")
                project = await projects.update(project_id, **updates)
                return _ok(project.to_response(detail="full"))

            if action == "set_progress":
                if progress is None:
                    return _err("progress is required for set_progress")
                project = await projects.set_progress(project_id, progress)
                return _ok(project.to_response())

            if action == "add_task":
                project = await projects.add_task(project_id, task or "", _date(due_date, "due_date"))
                return _ok(project.to_response(detail="full"))

            if index is None:
                return _err(f"index is required for {action}")

            if action == "toggle_stage":
                project = await projects.toggle_stage(project_id, index)
            elif action == "stage_notes":
                project = await projects.set_stage_notes(project_id, index, notes or "")
            elif action == "toggle_task":
                project = await projects.toggle_task(project_id, index)
            else:
                project = await projects.delete_task(project_id, index)
            return _ok(project.to_response(detail="full"))
        except VisionBoardError as e:
            return _err(str(e))

    # ── vb_pipeline ───────────────────────────────────────────

    @mcp.tool()
    async def vb_pipeline(
        action: Annotated[
            Literal["create", "list", "update", "move", "delete", "stats"],
            Field(description="create | list | update | move | delete | stats"),
        ],
        lead_id: Annotated[str | None, Field(description="Lead ID")] = None,
        project_name: Annotated[str | None, Field(description="Prospective project")] = None,
        client: Annotated[str | None, Field(description="Client")] = None,
        stage: Annotated[
            str | None,
            Field(description="Lead|Proposal|Negotiation|Closed-Won|Closed-Lost"),
        ] = None,
        estimated_value: Annotated[str | None, Field(description="Estimated value")] = None,
        expected_close_date: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        contact_email: Annotated[str | None, Field(description="Contact email")] = None,
        notes: Annotated[str | None, Field(description="Notes")] = None,
        limit: Annotated[
            int | None, Field(description="Max results (list), defaults to list_limit", ge=1)
        ] = None,
    ) -> str:
        """Track sales leads and pipeline conversion."""
        board = await _init()
        pipeline = board.pipeline

        try:
            if action == "create":
                lead = await pipeline.create(
                    project_name=project_name or "",
                    client=client or "",
                    stage=stage or "Lead",
                    estimated_value=estimated_value,
                    expected_close_date=_date(expected_close_date, "expected_close_date"),
                    contact_email=contact_email,
                    notes=notes or "",
                )
                return _ok(lead.to_response())

            if action == "list":
                leads, total = _page(
                    await pipeline.list_leads(stage=stage), limit, board.config.list_limit
                )
                return _ok(
                    {"count": len(leads), "total": total, "leads": [_dump(lead) for lead in leads]}
                )

            if action == "stats":
                return _ok(_dump(await pipeline.stats()))

            if not lead_id:
                return _err(f"lead_id is required for {action}")

            if action == "delete":
                await pipeline.delete(lead_id)
                return _ok({"deleted": lead_id})

            if action == "move":
                if not stage:
                    return _err("stage is required for move")
                return _ok((await pipeline.move_stage(lead_id, stage)).to_response())

            updates: dict[str, Any] = {}
            for key, value in (
                ("project_name", project_name),
                ("client", client),
                ("stage", stage),
                ("estimated_value", estimated_value),
                ("contact_email", contact_email),
                ("notes", notes),
            ):
                if value is not None:
                    updates[key] = value
            if expected_close_date is not None:
                updates["expected_close_date"] = _date(expected_close_date, "expected_close_date")
            if not updates:
                return _err("nothing to update")
            return _ok((await pipeline.update(lead_id, **updates)).to_response())
        except VisionBoardError as e:
            return _err(str(e))

    # ── vb_calendar ───────────────────────────────────────────

    @mcp.tool()
    async def vb_calendar(
        action: Annotated[
            Literal["add", "list", "day", "toggle", "delete", "grid"],
            Field(description="add | list | day | toggle | delete | grid"),
        ],
        event_id: Annotated[str | None, Field(description="Event ID")] = None,
        title: Annotated[str | None, Field(description="Event title (add)")] = None,
        on: Annotated[str | None, Field(description="YYYY-MM-DD (add, day)")] = None,
        start_time: Annotated[str | None, Field(description="HH:MM")] = None,
        end_time: Annotated[str | None, Field(description="HH:MM")] = None,
        category: Annotated[str | None, Field(description="Event category")] = None,
        description: Annotated[str | None, Field(description="Description")] = None,
        year: Annotated[int | None, Field(description="Year (grid)")] = None,
        month: Annotated[int | None, Field(description="Month 1-12 (grid)", ge=1, le=12)] = None,
        limit: Annotated[
            int | None, Field(description="Max results (list), defaults to list_limit", ge=1)
        ] = None,
    ) -> str:
        """Schedule work on the calendar and lay out a month."""
        board = await _init()
        calendar = board.calendar

        try:
            if action == "add":
                day = _date(on, "on")
                if day is None:
                    return _err("on is required for add")
                event = await calendar.schedule(
                    title=title or "",
                    on=day,
                    start_time=start_time,
                    end_time=end_time,
                    category=category or "Client Work",
                    description=description or "",
                )
                return _ok(event.to_response())

            if action == "list":
                events, total = _page(
                    await calendar.list_events(), limit, board.config.list_limit
                )
                return _ok({"count": len(events), "total": total, "events": [_dump(e) for e in events]})

            if action == "day":
                day = _date(on, "on") or date.today()
                events = await calendar.events_for_day(day)
                return _ok({"date": day.isoformat(), "events": [_dump(e) for e in events]})

            if action == "grid":
                today = date.today()
                weeks = month_grid(year or today.year, month or today.month)
                return _ok({"weeks": [[d.isoformat() for d in week] for week in weeks]})

            if not event_id:
                return _err(f"event_id is required for {action}")
            if action == "toggle":
                return _ok((await calendar.toggle_complete(event_id)).to_response())
            await calendar.delete(event_id)
            return _ok({"deleted": event_id})
        except VisionBoardError as e:
            return _err(str(e))

    # ── vb_expense ────────────────────────────────────────────

    @mcp.tool()
    async def vb_expense(
        action: Annotated[
            Literal["add", "list", "delete", "summary"],
            Field(description="add | list | delete | summary"),
        ],
        expense_id: Annotated[str | None, Field(description="Expense ID (delete)")] = None,
        description: Annotated[str | None, Field(description="What was bought")] = None,
        amount: Annotated[str | None, Field(description="Amount")] = None,
        category: Annotated[str | None, Field(description="Expense category")] = None,
        on: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        recurring: Annotated[bool, Field(description="Recurring expense")] = False,
        notes: Annotated[str | None, Field(description="Notes")] = None,
        period: Annotated[
            Literal["all", "month", "year"],
            Field(description="all | month | year (summary)"),
        ] = "all",
        limit: Annotated[
            int | None, Field(description="Max results (list), defaults to list_limit", ge=1)
        ] = None,
    ) -> str:
        """Record business expenses and summarize them by category."""
        board = await _init()
        expenses = board.expenses

        try:
            if action == "add":
                expense = await expenses.record(
                    description=description or "",
                    amount=amount,
                    category=category or "Software & Tools",
                    on=_date(on, "on"),
                    recurring=recurring,
                    notes=notes or "",
                )
                return _ok(expense.to_response())

            if action == "list":
                items, total = _page(
                    await expenses.list_expenses(), limit, board.config.list_limit
                )
                return _ok({"count": len(items), "total": total, "expenses": [_dump(e) for e in items]})

            if action == "summary":
                return _ok(_dump(await expenses.summarize(period)))

            if not expense_id:
                return _err("expense_id is required for delete")
            await expenses.delete(expense_id)
            return _ok({"deleted": expense_id})
        except VisionBoardError as e:
            return _err(str(e))

    # ── vb_learning ───────────────────────────────────────────

    @mcp.tool()
    async def vb_learning(
        action: Annotated[
            Literal["create", "list", "update", "progress", "delete", "stats", "schedule"],
            Field(description="create | list | update | progress | delete | stats | schedule"),
        ],
        item_id: Annotated[str | None, Field(description="Learning item ID")] = None,
        title: Annotated[str | None, Field(description="Title")] = None,
        description: Annotated[str | None, Field(description="Description")] = None,
        category: Annotated[str | None, Field(description="Learning category")] = None,
        status: Annotated[
            str | None,
            Field(description="Not Started|In Progress|Completed|On Hold"),
        ] = None,
        priority: Annotated[str | None, Field(description="Low|Medium|High")] = None,
        target_date: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        progress: Annotated[int | None, Field(description="Progress 0-100")] = None,
        on: Annotated[str | None, Field(description="Study date (schedule)")] = None,
        start_time: Annotated[str, Field(description="HH:MM (schedule)")] = "09:00",
        end_time: Annotated[str, Field(description="HH:MM (schedule)")] = "10:00",
        limit: Annotated[
            int | None, Field(description="Max results (list), defaults to list_limit", ge=1)
        ] = None,
    ) -> str:
        """Track learning goals and block study time on the calendar."""
        board = await _init()
        learning = board.learning

        fields: dict[str, Any] = {}
        for key, value in (
            ("description", description),
            ("category", category),
            ("status", status),
            ("priority", priority),
        ):
            if value is not None:
                fields[key] = value

        try:
            if target_date is not None:
                fields["target_date"] = _date(target_date, "target_date")

            if action == "create":
                item = await learning.create(title=title or "", **fields)
                return _ok(item.to_response())

            if action == "list":
                items, total = _page(
                    await learning.list_items(status=status), limit, board.config.list_limit
                )
                return _ok({"count": len(items), "total": total, "items": [_dump(i) for i in items]})

            if action == "stats":
                return _ok(await learning.stats())

            if not item_id:
                return _err(f"item_id is required for {action}")

            if action == "progress":
                if progress is None:
                    return _err("progress is required for progress")
                return _ok((await learning.update_progress(item_id, progress)).to_response())

            if action == "schedule":
                day = _date(on, "on")
                if day is None:
                    return _err("on is required for schedule")
                event = await learning.schedule(
                    item_id, on=day, start_time=start_time, end_time=end_time
                )
                return _ok(event.to_response())

            if action == "delete":
                await learning.delete(item_id)
                return _ok({"deleted": item_id})

            if title is not None:
                fields["title"] = title
            if not fields:
                return _err("nothing to update")
            return _ok((await learning.update(item_id, **fields)).to_response())
        except VisionBoardError as e:
            return _err(str(e))

    # ── vb_progress ───────────────────────────────────────────

    @mcp.tool()
    async def vb_progress(
        action: Annotated[
            Literal[
                "get", "metrics", "add_accomplishment", "delete_accomplishment",
                "add_note", "delete_note", "goal",
            ],
            Field(description="Progress record action"),
        ],
        current_revenue: Annotated[float | None, Field(ge=0)] = None,
        monthly_revenue: Annotated[float | None, Field(ge=0)] = None,
        active_clients: Annotated[int | None, Field(ge=0)] = None,
        retainer_clients: Annotated[int | None, Field(ge=0)] = None,
        completed_projects: Annotated[int | None, Field(ge=0)] = None,
        title: Annotated[str | None, Field(description="Accomplishment title")] = None,
        description: Annotated[str | None, Field(description="Accomplishment detail")] = None,
        on: Annotated[str | None, Field(description="YYYY-MM-DD")] = None,
        wins: Annotated[str | None, Field(description="Weekly wins")] = None,
        challenges: Annotated[str | None, Field(description="Weekly challenges")] = None,
        next_week_focus: Annotated[str | None, Field(description="Next week focus")] = None,
        index: Annotated[int | None, Field(description="Entry index (delete_*)")] = None,
    ) -> str:
        """Business metrics, accomplishments and weekly reflections."""
        board = await _init()
        vision = board.vision

        try:
            if action == "get":
                return _ok(_dump(await vision.get_or_default()))

            if action == "goal":
                return _ok(_dump(await vision.revenue_goal_progress()))

            if action == "metrics":
                metrics = {
                    k: v
                    for k, v in (
                        ("current_revenue", current_revenue),
                        ("monthly_revenue", monthly_revenue),
                        ("active_clients", active_clients),
                        ("retainer_clients", retainer_clients),
                        ("completed_projects", completed_projects),
                    )
                    if v is not None
                }
                if not metrics:
                    return _err("no metrics given")
                return _ok(_dump(await vision.save_metrics(**metrics)))

            if action == "add_accomplishment":
                record = await vision.add_accomplishment(
                    title=title or "", description=description or "", on=_date(on, "on")
                )
                return _ok(_dump(record))

            if action == "add_note":
                record = await vision.add_weekly_note(
                    week_of=_date(on, "on"),
                    wins=wins or "",
                    challenges=challenges or "",
                    next_week_focus=next_week_focus or "",
                )
                return _ok(_dump(record))

            if index is None:
                return _err(f"index is required for {action}")
            if action == "delete_accomplishment":
                return _ok(_dump(await vision.delete_accomplishment(index)))
            return _ok(_dump(await vision.delete_weekly_note(index)))
        except VisionBoardError as e:
            return _err(str(e))

    # ── Resources ─────────────────────────────────────────────

    @mcp.resource("vb://projects")
    async def vb_resource_projects() -> str:
        """Active projects with stage and task counts."""
        board = await _init()
        items = []
        for p in await board.projects.list_projects(active_only=True):
            items.append({**p.to_response(), "summary": _dump(await board.projects.summary(p.id))})
        return _ok({"projects": items})

    @mcp.resource("vb://pipeline")
    async def vb_resource_pipeline() -> str:
        """Pipeline value and win rate."""
        board = await _init()
        return _ok(_dump(await board.pipeline.stats()))

    # ── Prompts ───────────────────────────────────────────────

    @mcp.prompt()
    async def vb_weekly_review() -> str:
        """Weekly review of deadlines, open tasks and pipeline."""
        board = await _init()
        parts = ["# Weekly Review\n"]

        projects = await board.projects.list_projects(active_only=True)
        if projects:
            parts.append("## Active Projects")
            for p in projects:
                summary = await board.projects.summary(p.id)
                line = (
                    f"  - {p.project_name} ({p.client}) {p.status.value}, "
                    f"{p.progress_percentage}%, "
                    f"{summary.completed_tasks}/{summary.total_tasks} tasks"
                )
                if summary.days_until_deadline is not None:
                    line += f", {summary.days_until_deadline} days to deadline"
                parts.append(line)
        else:
            parts.append("No active projects.")

        stats = await board.pipeline.stats()
        parts.append("\n## Pipeline")
        parts.append(
            f"  {stats.active_count} open leads worth {stats.active_value:,.0f}, "
            f"win rate {stats.win_rate}%"
        )
        parts.append("\nWhat moved forward this week, and what should come next?")
        return "\n".join(parts)

    return mcp

