"""Sales pipeline lead model."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field

from visionboard.models.base import StoredModel


class LeadStage(StrEnum):
    LEAD = "Lead"
    PROPOSAL = "Proposal"
    NEGOTIATION = "Negotiation"
    CLOSED_WON = "Closed-Won"
    CLOSED_LOST = "Closed-Lost"


CLOSED_STAGES = {LeadStage.CLOSED_WON, LeadStage.CLOSED_LOST}


class PipelineLead(StoredModel):
    """A prospective project. Its stage is unrelated to project stages."""

    entity = "ProjectPipeline"

    project_name: str
    client: str
    stage: LeadStage = LeadStage.LEAD
    estimated_value: float = Field(default=0.0, ge=0)
    expected_close_date: date | None = None
    contact_email: str | None = None
    last_contact_date: date | None = None
    notes: str = ""

    @property
    def is_closed(self) -> bool:
        return self.stage in CLOSED_STAGES


class StageStat(BaseModel):
    stage: LeadStage
    count: int
    value: float


class PipelineStats(BaseModel):
    active_count: int
    active_value: float
    won_count: int
    won_value: float
    win_rate: int
    total_count: int
    stages: list[StageStat]
