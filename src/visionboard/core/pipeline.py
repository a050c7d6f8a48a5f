"""Sales pipeline: leads and their conversion statistics."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import ValidationError

from visionboard.errors import InvalidInput, NotFound
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import parse_amount, require_text, round_half_up
from visionboard.models.pipeline import LeadStage, PipelineLead, PipelineStats, StageStat
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = PipelineLead.entity

EDITABLE_FIELDS = {
    "project_name",
    "client",
    "stage",
    "estimated_value",
    "expected_close_date",
    "contact_email",
    "last_contact_date",
    "notes",
}


class PipelineService:
    """CRUD for pipeline leads plus the stage breakdown shown on the board."""

    def __init__(self, store: EntityStore, event_bus: EventBus) -> None:
        self._store = store
        self._event_bus = event_bus

    async def create(
        self,
        *,
        project_name: str,
        client: str,
        stage: LeadStage | str = LeadStage.LEAD,
        estimated_value: Any = None,
        expected_close_date: date | None = None,
        contact_email: str | None = None,
        last_contact_date: date | None = None,
        notes: str = "",
    ) -> PipelineLead:
        lead = _build(
            project_name=require_text(project_name, "project_name"),
            client=require_text(client, "client"),
            stage=stage,
            estimated_value=parse_amount(estimated_value, field="estimated_value"),
            expected_close_date=expected_close_date,
            contact_email=contact_email or None,
            last_contact_date=last_contact_date,
            notes=notes,
        )
        data = await self._store.create(ENTITY, lead.to_storage())
        created = PipelineLead(**data)
        logger.info("Created lead: %s (id=%s)", created.project_name, created.id)
        await self._event_bus.emit(EventType.LEAD_CREATED, {"lead_id": created.id})
        return created

    async def get(self, lead_id: str) -> PipelineLead | None:
        data = await self._store.get(ENTITY, lead_id)
        return PipelineLead(**data) if data else None

    async def list_leads(self, *, stage: LeadStage | str | None = None) -> list[PipelineLead]:
        leads = [PipelineLead(**d) for d in await self._store.list(ENTITY, "-created_date")]
        if stage is not None and stage != "all":
            leads = [lead for lead in leads if lead.stage == stage]
        return leads

    async def update(self, lead_id: str, **updates: Any) -> PipelineLead:
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Cannot edit fields: {sorted(unknown)}")
        for key in ("project_name", "client"):
            if key in updates:
                updates[key] = require_text(updates[key], key)
        if "estimated_value" in updates:
            updates["estimated_value"] = parse_amount(
                updates["estimated_value"], field="estimated_value"
            )

        current = await self.get(lead_id)
        if current is None:
            raise NotFound(ENTITY, lead_id)
        updated = _build(**{**current.model_dump(), **updates})

        payload = {k: v for k, v in updated.to_storage().items() if k in updates}
        data = await self._store.update(ENTITY, lead_id, payload)
        logger.info("Updated lead %s: %s", lead_id, ", ".join(sorted(payload)))
        await self._event_bus.emit(
            EventType.LEAD_UPDATED, {"lead_id": lead_id, "changes": sorted(payload)}
        )
        return PipelineLead(**data)

    async def move_stage(self, lead_id: str, stage: LeadStage | str) -> PipelineLead:
        return await self.update(lead_id, stage=stage)

    async def delete(self, lead_id: str) -> None:
        if await self.get(lead_id) is None:
            raise NotFound(ENTITY, lead_id)
        await self._store.delete(ENTITY, lead_id)
        logger.info("Deleted lead: id=%s", lead_id)
        await self._event_bus.emit(EventType.LEAD_DELETED, {"lead_id": lead_id})

    async def stats(self) -> PipelineStats:
        return pipeline_stats(await self.list_leads())


def pipeline_stats(leads: list[PipelineLead]) -> PipelineStats:
    """Active value, won value, win rate and per-stage counts.

    Win rate is won / (won + lost) as a rounded percentage, 0 while nothing
    has closed.
    """
    active = [lead for lead in leads if not lead.is_closed]
    won = [lead for lead in leads if lead.stage == LeadStage.CLOSED_WON]
    closed = [lead for lead in leads if lead.is_closed]
    win_rate = round_half_up(100 * len(won) / len(closed)) if closed else 0

    stages = []
    for stage in LeadStage:
        in_stage = [lead for lead in leads if lead.stage == stage]
        stages.append(
            StageStat(
                stage=stage,
                count=len(in_stage),
                value=sum(lead.estimated_value for lead in in_stage),
            )
        )

    return PipelineStats(
        active_count=len(active),
        active_value=sum(lead.estimated_value for lead in active),
        won_count=len(won),
        won_value=sum(lead.estimated_value for lead in won),
        win_rate=win_rate,
        total_count=len(leads),
        stages=stages,
    )


def _build(**fields: Any) -> PipelineLead:
    try:
        return PipelineLead(**fields)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e
