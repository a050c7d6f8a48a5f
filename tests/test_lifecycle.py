"""Tests for the project lifecycle rules."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from visionboard.core import lifecycle
from visionboard.errors import IndexOutOfRange, InvalidInput
from visionboard.models.project import STAGE_TEMPLATE, Project, ProjectStatus, Stage

TODAY = date(2026, 3, 10)


@pytest.fixture
def project() -> Project:
    return lifecycle.new_project(project_name="E-commerce Website", client="Acme", today=TODAY)


# --- Creation ---


def test_new_project_defaults(project: Project):
    assert project.progress_percentage == 0
    assert len(project.stages) == 5
    assert all(not s.completed and s.notes == "" for s in project.stages)
    assert [s.name for s in project.stages] == list(STAGE_TEMPLATE)
    assert project.tasks == []
    assert project.status == ProjectStatus.PLANNING
    assert project.start_date == TODAY
    assert project.color == "#3b82f6"


def test_new_project_value_absent_is_zero(project: Project):
    assert project.project_value == 0


def test_new_project_value_from_string():
    p = lifecycle.new_project(project_name="Site", client="Bob", project_value="2500")
    assert p.project_value == 2500


@pytest.mark.parametrize("raw", ["", "abc", "   ", None, float("nan"), "2500 USD"])
def test_new_project_unparsable_value_is_zero(raw):
    p = lifecycle.new_project(project_name="Site", client="Bob", project_value=raw)
    assert p.project_value == 0


def test_new_project_negative_value_rejected():
    with pytest.raises(InvalidInput):
        lifecycle.new_project(project_name="Site", client="Bob", project_value="-10")


@pytest.mark.parametrize("name,client", [("", "Acme"), ("   ", "Acme"), ("Site", ""), ("Site", None)])
def test_new_project_requires_name_and_client(name, client):
    with pytest.raises(InvalidInput):
        lifecycle.new_project(project_name=name, client=client)


def test_new_project_strips_text():
    p = lifecycle.new_project(project_name="  Site  ", client=" Acme ")
    assert p.project_name == "Site"
    assert p.client == "Acme"


def test_new_project_unknown_status_rejected():
    with pytest.raises(InvalidInput):
        lifecycle.new_project(project_name="Site", client="Acme", status="Abandoned")


def test_new_project_deadline_before_start_allowed():
    p = lifecycle.new_project(
        project_name="Site",
        client="Acme",
        start_date=date(2026, 5, 1),
        deadline=date(2026, 4, 1),
    )
    assert p.deadline < p.start_date


# --- Stages ---


def test_toggle_two_stages_gives_forty(project: Project):
    p = lifecycle.toggle_stage(project, 0)
    p = lifecycle.toggle_stage(p, 2)
    assert p.progress_percentage == 40
    assert [s.completed for s in p.stages] == [True, False, True, False, False]


def test_toggle_stage_does_not_mutate_input(project: Project):
    lifecycle.toggle_stage(project, 1)
    assert not project.stages[1].completed
    assert project.progress_percentage == 0


def test_toggle_stage_twice_restores(project: Project):
    p = lifecycle.toggle_stage(project, 3)
    p = lifecycle.toggle_stage(p, 3)
    assert p.stages == project.stages
    assert p.progress_percentage == project.progress_percentage


def test_progress_tracks_every_toggle(project: Project):
    p = project
    for index in [0, 1, 4, 1, 2, 3, 0, 1]:
        p = lifecycle.toggle_stage(p, index)
        expected = round(100 * sum(s.completed for s in p.stages) / 5)
        assert p.progress_percentage == expected


def test_all_stages_complete_is_hundred(project: Project):
    p = project
    for i in range(5):
        p = lifecycle.toggle_stage(p, i)
    assert p.progress_percentage == 100


def test_toggle_overwrites_manual_override(project: Project):
    p = lifecycle.toggle_stage(project, 1)
    p = lifecycle.set_progress_override(p, 75)
    assert p.progress_percentage == 75

    p = lifecycle.toggle_stage(p, 0)
    assert p.progress_percentage == 40


@pytest.mark.parametrize("index", [-1, 5, 99])
def test_toggle_stage_bad_index(project: Project, index):
    with pytest.raises(IndexOutOfRange):
        lifecycle.toggle_stage(project, index)


def test_stage_progress_rounds_half_up():
    stages = [Stage(name=str(i), completed=i < 1) for i in range(8)]
    # 12.5 rounds up, unlike round()
    assert lifecycle.stage_progress(stages) == 13
    assert lifecycle.stage_progress([]) == 0


def test_set_stage_notes(project: Project):
    p = lifecycle.set_stage_notes(project, 2, "Use the new component library")
    assert p.stages[2].notes == "Use the new component library"
    assert p.progress_percentage == 0
    assert project.stages[2].notes == ""


def test_set_stage_notes_bad_index(project: Project):
    with pytest.raises(IndexOutOfRange):
        lifecycle.set_stage_notes(project, 7, "x")


# --- Progress override ---


def test_override_leaves_stages(project: Project):
    p = lifecycle.set_progress_override(project, 60)
    assert p.progress_percentage == 60
    assert p.stages == project.stages


@pytest.mark.parametrize("value", [-1, 101, 250])
def test_override_out_of_range_rejected(project: Project, value):
    with pytest.raises(InvalidInput):
        lifecycle.set_progress_override(project, value)


def test_override_accepts_numeric_string(project: Project):
    assert lifecycle.set_progress_override(project, "35").progress_percentage == 35


def test_override_rejects_garbage(project: Project):
    with pytest.raises(InvalidInput):
        lifecycle.set_progress_override(project, "lots")


# --- Tasks ---


def test_add_then_toggle_marks_only_that_task(project: Project):
    p = lifecycle.add_task(project, "Wireframes")
    p = lifecycle.add_task(p, "Copy review")
    p = lifecycle.add_task(p, "Launch checklist", date(2026, 4, 1))
    p = lifecycle.toggle_task(p, len(p.tasks) - 1)

    assert [t.completed for t in p.tasks] == [False, False, True]
    assert p.tasks[2].due_date == date(2026, 4, 1)


def test_add_task_requires_text(project: Project):
    with pytest.raises(InvalidInput):
        lifecycle.add_task(project, "   ")


def test_delete_task_preserves_order(project: Project):
    p = project
    for text in ["A", "B", "C"]:
        p = lifecycle.add_task(p, text)
    p = lifecycle.delete_task(p, 1)
    assert [t.task for t in p.tasks] == ["A", "C"]


@pytest.mark.parametrize("op", [lifecycle.toggle_task, lifecycle.delete_task])
def test_task_ops_bad_index(project: Project, op):
    p = lifecycle.add_task(project, "Only task")
    with pytest.raises(IndexOutOfRange):
        op(p, 1)


# --- Status ---


def test_status_any_to_any(project: Project):
    p = lifecycle.set_status(project, "Completed")
    p = lifecycle.set_status(p, ProjectStatus.PLANNING)
    p = lifecycle.set_status(p, "On Hold")
    assert p.status == ProjectStatus.ON_HOLD
    assert p.stages == project.stages
    assert p.progress_percentage == 0


# --- Summary ---


def test_summary_counts(project: Project):
    p = lifecycle.toggle_stage(project, 0)
    p = lifecycle.add_task(p, "A")
    p = lifecycle.add_task(p, "B")
    p = lifecycle.toggle_task(p, 0)
    summary = lifecycle.derive_summary(p, TODAY)

    assert summary.completed_stages == 1
    assert summary.total_stages == 5
    assert summary.completed_tasks == 1
    assert summary.total_tasks == 2
    assert summary.days_until_deadline is None


def test_summary_deadline_in_three_days(project: Project):
    p = project.model_copy(update={"deadline": TODAY + timedelta(days=3)})
    assert lifecycle.derive_summary(p, TODAY).days_until_deadline == 3


def test_summary_overdue_is_negative(project: Project):
    p = project.model_copy(update={"deadline": TODAY - timedelta(days=1)})
    assert lifecycle.derive_summary(p, TODAY).days_until_deadline == -1
