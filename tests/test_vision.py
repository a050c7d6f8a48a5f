"""Tests for the VisionProgress singleton."""

from datetime import date

import pytest

from visionboard.core.vision import VisionProgressService
from visionboard.errors import IndexOutOfRange, InvalidInput
from visionboard.events.types import EventType


@pytest.fixture
def vision(memory_store, event_bus):
    return VisionProgressService(memory_store, event_bus, revenue_goal=100000)


async def test_get_when_absent(vision):
    assert await vision.get() is None
    default = await vision.get_or_default()
    assert default.current_revenue == 0
    assert default.accomplishments == []


async def test_save_creates_once_then_updates(vision, memory_store):
    first = await vision.save_metrics(current_revenue=42000, active_clients=3)
    second = await vision.save_metrics(monthly_revenue=5000)

    assert first.id == second.id
    assert second.current_revenue == 42000
    assert second.monthly_revenue == 5000
    assert await memory_store.count("VisionProgress") == 1


async def test_every_write_path_keeps_one_row(vision, memory_store):
    await vision.add_weekly_note(week_of=date(2026, 3, 2), wins="Signed retainer")
    await vision.add_accomplishment(title="First 5k month")
    await vision.save_metrics(retainer_clients=1)
    assert await memory_store.count("VisionProgress") == 1


async def test_save_metrics_validation(vision):
    with pytest.raises(InvalidInput):
        await vision.save_metrics(followers=10)
    with pytest.raises(InvalidInput):
        await vision.save_metrics(active_clients=-1)


async def test_accomplishments_append_and_delete(vision):
    await vision.add_accomplishment(title="A", on=date(2026, 1, 1))
    await vision.add_accomplishment(title="B", on=date(2026, 1, 2))
    await vision.add_accomplishment(title="C", on=date(2026, 1, 3))

    record = await vision.delete_accomplishment(1)
    assert [a.title for a in record.accomplishments] == ["A", "C"]
    assert record.accomplishments[0].category == "win"


async def test_accomplishment_requires_title(vision):
    with pytest.raises(InvalidInput):
        await vision.add_accomplishment(title=" ")


async def test_weekly_notes_newest_first(vision):
    await vision.add_weekly_note(week_of=date(2026, 2, 23), wins="old")
    record = await vision.add_weekly_note(week_of=date(2026, 3, 2), wins="new")
    assert [n.wins for n in record.weekly_notes] == ["new", "old"]

    record = await vision.delete_weekly_note(0)
    assert [n.wins for n in record.weekly_notes] == ["old"]


async def test_delete_bad_index(vision):
    with pytest.raises(IndexOutOfRange):
        await vision.delete_weekly_note(0)
    with pytest.raises(IndexOutOfRange):
        await vision.delete_accomplishment(-1)


async def test_revenue_goal_progress(vision):
    await vision.save_metrics(current_revenue=125000)
    goal = await vision.revenue_goal_progress()
    assert goal.percentage == 125
    assert goal.bar_width == 100


async def test_metrics_metrics_preserve_lists(vision):
    await vision.add_accomplishment(title="Launched site")
    record = await vision.save_metrics(completed_projects=4)
    assert [a.title for a in record.accomplishments] == ["Launched site"]


async def test_emits_vision_updated(vision, captured):
    await vision.save_metrics(active_clients=2)
    assert captured[-1]["type"] == EventType.VISION_UPDATED
    assert captured[-1]["data"]["changes"] == ["active_clients"]
