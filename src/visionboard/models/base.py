"""Shared pieces of every stored entity model."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel

from visionboard.errors import InvalidInput

_STORAGE_MANAGED = {"id", "created_date", "updated_date"}


class StoredModel(BaseModel):
    """A flat record persisted wholesale through the entity store."""

    entity: ClassVar[str]

    id: str | None = None
    created_date: datetime | None = None
    updated_date: datetime | None = None

    def to_storage(self) -> dict[str, Any]:
        """Fields to hand to the store. Storage owns id and timestamps."""
        return self.model_dump(mode="json", exclude=_STORAGE_MANAGED)

    def to_response(self) -> dict[str, Any]:
        return {"_v": "1.0", **self.model_dump(mode="json")}


def parse_amount(value: Any, *, field: str = "amount") -> float:
    """Parse a monetary amount the way the board's forms do.

    Absent, blank or unparsable input becomes 0. Negative amounts are
    rejected.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    if amount < 0:
        raise InvalidInput(f"{field} cannot be negative: {amount}")
    return amount


def require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInput(f"{field} cannot be empty")
    return value.strip()


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
