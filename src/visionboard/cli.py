"""CLI: init, serve, status, projects, show."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from visionboard.config import Config
from visionboard.core.board import Board
from visionboard.storage.sqlite_store import SQLiteStore


def _load(path: str) -> Config:
    config = Config.load(Path(path).expanduser().resolve())
    config.configure_logging()
    if not config.db_path.exists():
        click.echo(f"Error: No database at {config.db_path}. Run 'visionboard init' first.", err=True)
        sys.exit(1)
    return config


@click.group()
@click.version_option(package_name="visionboard")
def main() -> None:
    """Visionboard: projects, pipeline and progress for a freelance business."""


@main.command()
@click.argument("path", type=click.Path(), default="~/.visionboard")
def init(path: str) -> None:
    """Initialize a new board workspace."""
    workspace = Path(path).expanduser().resolve()

    async def _init() -> None:
        config = Config(workspace_path=workspace)
        store = SQLiteStore(config.db_path)
        await store.initialize()
        await store.close()
        config.save()

    asyncio.run(_init())
    click.echo(f"Initialized workspace at {workspace}")
    click.echo(f"Database: {workspace / 'visionboard.db'}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--transport", type=click.Choice(["stdio"]), default="stdio")
def serve(path: str, transport: str) -> None:
    """Start the MCP server."""
    config = _load(path)

    from visionboard.server import create_server

    server = create_server(str(config.db_path), config)
    server.run(transport=transport)  # type: ignore[arg-type]


@main.command()
@click.argument("path", type=click.Path(exists=True))
def status(path: str) -> None:
    """Show record counts per entity."""
    config = _load(path)

    async def _status() -> dict:
        store = SQLiteStore(config.db_path)
        try:
            await store.initialize()
            return await store.get_stats()
        finally:
            await store.close()

    stats = asyncio.run(_status())
    click.echo(json.dumps(stats, indent=2))


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--all", "show_all", is_flag=True, help="Include completed projects")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Max rows (default: list_limit)")
def projects(path: str, show_all: bool, limit: int | None) -> None:
    """List ongoing projects."""
    config = _load(path)
    limit = limit or config.list_limit

    async def _list():
        board = await Board.open(config)
        try:
            items = (await board.projects.list_projects(active_only=not show_all))[:limit]
            return [(p, await board.projects.summary(p.id)) for p in items]
        finally:
            await board.close()

    rows = asyncio.run(_list())

    table = Table(title="Ongoing projects")
    table.add_column("ID", style="dim")
    table.add_column("Project", style="cyan")
    table.add_column("Client")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Tasks", justify="right")
    table.add_column("Due in", justify="right")
    for project, summary in rows:
        due = summary.days_until_deadline
        table.add_row(
            project.id,
            project.project_name,
            project.client,
            project.status.value,
            f"{project.progress_percentage}%",
            f"{summary.completed_tasks}/{summary.total_tasks}",
            "-" if due is None else (f"[red]{due}d[/red]" if due < 0 else f"{due}d"),
        )
    Console().print(table)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("project_id")
def show(path: str, project_id: str) -> None:
    """Show one project's stages and tasks."""
    config = _load(path)

    async def _get():
        board = await Board.open(config)
        try:
            return await board.projects.get(project_id)
        finally:
            await board.close()

    project = asyncio.run(_get())
    if project is None:
        click.echo(f"Error: project {project_id} not found", err=True)
        sys.exit(1)

    console = Console()
    console.print(
        f"[bold]{project.project_name}[/bold] for {project.client} "
        f"({project.status.value}, {project.progress_percentage}%)"
    )
    stages = Table(title="Stages")
    stages.add_column("#", justify="right")
    stages.add_column("Stage")
    stages.add_column("Done")
    stages.add_column("Notes")
    for i, stage in enumerate(project.stages):
        stages.add_row(str(i), stage.name, "x" if stage.completed else "", stage.notes)
    console.print(stages)

    tasks = Table(title="Tasks")
    tasks.add_column("#", justify="right")
    tasks.add_column("Task")
    tasks.add_column("Done")
    tasks.add_column("Due")
    for i, task in enumerate(project.tasks):
        tasks.add_row(
            str(i),
            task.task,
            "x" if task.completed else "",
            task.due_date.isoformat() if task.due_date else "",
        )
    console.print(tasks)


if __name__ == "__main__":
    main()
