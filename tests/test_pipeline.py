"""Tests for the sales pipeline."""

import pytest

from visionboard.core.pipeline import PipelineService, pipeline_stats
from visionboard.errors import InvalidInput, NotFound
from visionboard.models.pipeline import LeadStage, PipelineLead


@pytest.fixture
def pipeline(memory_store, event_bus):
    return PipelineService(memory_store, event_bus)


def _lead(stage, value):
    return PipelineLead(project_name="p", client="c", stage=stage, estimated_value=value)


async def test_create_defaults(pipeline):
    lead = await pipeline.create(project_name="Rebrand", client="Bakery", estimated_value="abc")
    assert lead.stage == LeadStage.LEAD
    assert lead.estimated_value == 0
    assert lead.id


async def test_create_requires_fields(pipeline):
    with pytest.raises(InvalidInput):
        await pipeline.create(project_name="", client="Bakery")


async def test_create_unknown_stage(pipeline):
    with pytest.raises(InvalidInput):
        await pipeline.create(project_name="Rebrand", client="Bakery", stage="Ghosted")


async def test_move_stage(pipeline):
    lead = await pipeline.create(project_name="Rebrand", client="Bakery", estimated_value=3000)
    moved = await pipeline.move_stage(lead.id, "Proposal")
    assert moved.stage == LeadStage.PROPOSAL
    assert moved.estimated_value == 3000


async def test_update_missing(pipeline):
    with pytest.raises(NotFound):
        await pipeline.update("missing", notes="x")


@pytest.mark.parametrize("field", ["project_name", "client"])
async def test_update_rejects_blank_required_text(pipeline, field):
    lead = await pipeline.create(project_name="Rebrand", client="Bakery")
    with pytest.raises(InvalidInput):
        await pipeline.update(lead.id, **{field: "   "})
    stored = await pipeline.get(lead.id)
    assert stored.project_name == "Rebrand"
    assert stored.client == "Bakery"


async def test_filter_by_stage(pipeline):
    await pipeline.create(project_name="A", client="x")
    b = await pipeline.create(project_name="B", client="x", stage="Negotiation")
    assert [lead.id for lead in await pipeline.list_leads(stage="Negotiation")] == [b.id]
    assert len(await pipeline.list_leads(stage="all")) == 2


async def test_delete(pipeline):
    lead = await pipeline.create(project_name="A", client="x")
    await pipeline.delete(lead.id)
    assert await pipeline.get(lead.id) is None


def test_stats():
    stats = pipeline_stats(
        [
            _lead("Lead", 1000),
            _lead("Proposal", 2000),
            _lead("Closed-Won", 5000),
            _lead("Closed-Won", 1000),
            _lead("Closed-Lost", 4000),
        ]
    )
    assert stats.active_count == 2
    assert stats.active_value == 3000
    assert stats.won_count == 2
    assert stats.won_value == 6000
    assert stats.win_rate == 67
    assert stats.total_count == 5
    by_stage = {s.stage: s for s in stats.stages}
    assert by_stage[LeadStage.CLOSED_LOST].value == 4000
    assert by_stage[LeadStage.NEGOTIATION].count == 0


def test_stats_nothing_closed():
    stats = pipeline_stats([_lead("Lead", 100)])
    assert stats.win_rate == 0
    assert pipeline_stats([]).win_rate == 0


async def test_service_stats(pipeline):
    await pipeline.create(project_name="A", client="x", stage="Closed-Won", estimated_value=10)
    assert (await pipeline.stats()).win_rate == 100
