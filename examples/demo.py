"""Walkthrough of a project's life on the board: create, stages, tasks, summary.

Uses a temporary workspace, so nothing persists after the run.
"""

import asyncio
import json
import tempfile
from datetime import date, timedelta
from pathlib import Path

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from visionboard.config import Config
from visionboard.core.board import Board

console = Console()


def step_header(num: int, title: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold cyan]Step {num}:[/bold cyan] [yellow]{title}[/yellow]",
            border_style="cyan",
        )
    )


def display_json(data: dict, title: str | None = None) -> None:
    console.print(Panel(JSON(json.dumps(data, indent=2)), title=title, border_style="green"))


async def demo() -> None:
    """Run the walkthrough."""
    workspace = Path(tempfile.mkdtemp())
    console.print(f"[dim]Workspace: {workspace}[/dim]\n")

    board = await Board.open(Config(workspace_path=workspace))
    projects = board.projects

    step_header(1, "Creating a project")
    project = await projects.create(
        project_name="E-commerce Website",
        client="Northwind Coffee",
        deadline=date.today() + timedelta(days=21),
        project_value="4800",
    )
    console.print(f"[green]✓[/green] Created {project.project_name} (id={project.id})")
    display_json(project.to_response(detail="full"), title="New project")

    step_header(2, "Completing stages")
    await projects.toggle_stage(project.id, 0)
    project = await projects.toggle_stage(project.id, 1)
    console.print(f"Two of five stages done: [bold]{project.progress_percentage}%[/bold]")

    project = await projects.set_progress(project.id, 55)
    console.print(f"Manual override: [bold]{project.progress_percentage}%[/bold]")
    project = await projects.toggle_stage(project.id, 2)
    console.print(f"Next stage toggle recomputes: [bold]{project.progress_percentage}%[/bold]")

    step_header(3, "Tracking tasks")
    for text in ["Product photography", "Checkout flow", "Shipping rules"]:
        await projects.add_task(project.id, text, date.today() + timedelta(days=7))
    await projects.toggle_task(project.id, 1)
    project = await projects.delete_task(project.id, 2)

    table = Table(title="Tasks")
    table.add_column("#", justify="right")
    table.add_column("Task", style="cyan")
    table.add_column("Done")
    for i, task in enumerate(project.tasks):
        table.add_row(str(i), task.task, "✓" if task.completed else "")
    console.print(table)

    step_header(4, "Summary")
    summary = await projects.summary(project.id)
    display_json(summary.model_dump(), title="Summary")
    display_json(await projects.portfolio(), title="Portfolio")

    await board.close()
    console.print("\n[bold green]✓ Demo complete![/bold green]\n")


if __name__ == "__main__":
    asyncio.run(demo())
