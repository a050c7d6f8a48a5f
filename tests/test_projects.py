"""Tests for ProjectService over the entity store."""

import pytest

from visionboard.core.projects import ProjectService
from visionboard.errors import IndexOutOfRange, InvalidInput, NotFound, StorageFailure
from visionboard.events.types import EventType
from visionboard.models.project import ProjectStatus


@pytest.fixture
def service(memory_store, event_bus):
    return ProjectService(memory_store, event_bus)


async def _create(service, **overrides):
    fields = {"project_name": "Portfolio Site", "client": "Dana Studio"}
    fields.update(overrides)
    return await service.create(**fields)


@pytest.mark.asyncio
async def test_create_assigns_id_and_template(service):
    project = await _create(service)

    assert project.id
    assert project.created_date is not None
    assert project.progress_percentage == 0
    assert len(project.stages) == 5
    assert project.tasks == []


@pytest.mark.asyncio
async def test_create_emits_event(service, captured):
    project = await _create(service)

    assert captured[0]["type"] == EventType.PROJECT_CREATED
    assert captured[0]["data"]["project_id"] == project.id


@pytest.mark.asyncio
async def test_create_invalid_does_not_touch_store(service, memory_store):
    with pytest.raises(InvalidInput):
        await service.create(project_name="", client="Acme")
    assert await memory_store.count("OngoingProject") == 0


@pytest.mark.asyncio
async def test_create_value_from_string(service):
    project = await _create(service, project_value="2500")
    assert project.project_value == 2500


@pytest.mark.asyncio
async def test_get_missing_returns_none(service):
    assert await service.get("nope") is None


@pytest.mark.asyncio
async def test_toggle_stage_persists_progress(service):
    project = await _create(service)
    await service.toggle_stage(project.id, 0)
    await service.toggle_stage(project.id, 2)

    stored = await service.get(project.id)
    assert stored.progress_percentage == 40
    assert stored.stages[0].completed and stored.stages[2].completed


@pytest.mark.asyncio
async def test_override_then_toggle_overwrites(service):
    project = await _create(service)
    await service.toggle_stage(project.id, 1)
    overridden = await service.set_progress(project.id, 75)
    assert overridden.progress_percentage == 75

    toggled = await service.toggle_stage(project.id, 0)
    assert toggled.progress_percentage == 40


@pytest.mark.asyncio
async def test_toggle_stage_event_carries_index(service, captured):
    project = await _create(service)
    await service.toggle_stage(project.id, 3)

    event = captured[-1]
    assert event["type"] == EventType.STAGE_TOGGLED
    assert event["data"]["stage_index"] == 3
    assert event["data"]["changes"] == ["progress_percentage", "stages"]


@pytest.mark.asyncio
async def test_stage_notes(service):
    project = await _create(service)
    updated = await service.set_stage_notes(project.id, 1, "Moodboard approved")
    assert updated.stages[1].notes == "Moodboard approved"
    assert updated.progress_percentage == 0


@pytest.mark.asyncio
async def test_task_lifecycle(service):
    project = await _create(service)
    for text in ["A", "B", "C"]:
        await service.add_task(project.id, text)

    toggled = await service.toggle_task(project.id, 2)
    assert [t.completed for t in toggled.tasks] == [False, False, True]

    remaining = await service.delete_task(project.id, 1)
    assert [t.task for t in remaining.tasks] == ["A", "C"]
    assert remaining.tasks[1].completed


@pytest.mark.asyncio
async def test_bad_indexes(service):
    project = await _create(service)
    with pytest.raises(IndexOutOfRange):
        await service.toggle_stage(project.id, 5)
    with pytest.raises(IndexOutOfRange):
        await service.delete_task(project.id, 0)


@pytest.mark.asyncio
async def test_add_task_empty_text(service):
    project = await _create(service)
    with pytest.raises(InvalidInput):
        await service.add_task(project.id, "")


@pytest.mark.asyncio
async def test_mutation_on_missing_project(service):
    with pytest.raises(NotFound):
        await service.toggle_stage("missing", 0)


@pytest.mark.asyncio
async def test_update_plain_fields(service):
    project = await _create(service)
    updated = await service.update(
        project.id, status="In Progress", project_value="4000", deadline="2026-12-01"
    )

    assert updated.status == ProjectStatus.IN_PROGRESS
    assert updated.project_value == 4000
    assert updated.deadline.isoformat() == "2026-12-01"
    assert updated.stages == project.stages


@pytest.mark.asyncio
async def test_update_rejects_derived_fields(service):
    project = await _create(service)
    with pytest.raises(InvalidInput):
        await service.update(project.id, progress_percentage=90)


@pytest.mark.asyncio
async def test_update_rejects_bad_status(service):
    project = await _create(service)
    with pytest.raises(InvalidInput):
        await service.update(project.id, status="Archived")


@pytest.mark.asyncio
async def test_list_newest_first_and_filters(service):
    first = await _create(service, project_name="First")
    second = await _create(service, project_name="Second", status="Completed")
    third = await _create(service, project_name="Third")

    assert [p.id for p in await service.list_projects()] == [third.id, second.id, first.id]
    assert [p.id for p in await service.list_projects(active_only=True)] == [third.id, first.id]
    assert [p.id for p in await service.list_projects(status="Completed")] == [second.id]


@pytest.mark.asyncio
async def test_portfolio(service):
    await _create(service, project_value=1000)
    await _create(service, project_value=500, status="Review")
    await _create(service, project_value=9000, status="Completed")

    portfolio = await service.portfolio()
    assert portfolio["total"] == 3
    assert portfolio["active"] == 2
    assert portfolio["active_value"] == 1500
    assert portfolio["by_status"]["Completed"] == 1
    assert portfolio["by_status"]["On Hold"] == 0


@pytest.mark.asyncio
async def test_delete(service, captured):
    project = await _create(service)
    await service.delete(project.id)

    assert await service.get(project.id) is None
    assert captured[-1]["type"] == EventType.PROJECT_DELETED
    with pytest.raises(NotFound):
        await service.delete(project.id)


@pytest.mark.asyncio
async def test_summary(service):
    project = await _create(service)
    await service.add_task(project.id, "Kickoff call")
    summary = await service.summary(project.id)
    assert summary.total_tasks == 1
    assert summary.total_stages == 5


@pytest.mark.asyncio
async def test_storage_failure_surfaces_without_retry(failing_store, event_bus):
    service = ProjectService(failing_store, event_bus)
    project = await _create(service)

    failing_store.fail_writes = True
    with pytest.raises(StorageFailure):
        await service.toggle_stage(project.id, 0)

    failing_store.fail_writes = False
    stored = await service.get(project.id)
    assert stored.progress_percentage == 0
    assert not stored.stages[0].completed


@pytest.mark.asyncio
async def test_last_write_wins(service):
    project = await _create(service)
    # Two holders of the same snapshot; no conflict is detected
    await service.update(project.id, color="#ec4899")
    await service.update(project.id, color="#10b981")
    assert (await service.get(project.id)).color == "#10b981"


@pytest.mark.asyncio
async def test_roundtrip_through_sqlite(store, event_bus):
    service = ProjectService(store, event_bus)
    project = await _create(service, deadline="2026-11-30")
    await service.toggle_stage(project.id, 4)
    await service.add_task(project.id, "Handover", None)

    stored = await service.get(project.id)
    assert stored.progress_percentage == 20
    assert stored.stages[4].completed
    assert stored.tasks[0].task == "Handover"
    assert stored.deadline.isoformat() == "2026-11-30"
