"""Business expense model and summary projection."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, Field

from visionboard.models.base import StoredModel


class ExpenseCategory(StrEnum):
    SOFTWARE = "Software & Tools"
    MARKETING = "Marketing & Ads"
    EDUCATION = "Education & Training"
    HARDWARE = "Hardware & Equipment"
    HOSTING = "Hosting & Infrastructure"
    SUBSCRIPTIONS = "Subscriptions"
    CONTRACTORS = "Freelancers & Contractors"
    OFFICE = "Office & Supplies"
    OTHER = "Other"


class Period(StrEnum):
    ALL = "all"
    MONTH = "month"
    YEAR = "year"


class Expense(StoredModel):
    entity = "Expense"

    description: str
    amount: float = Field(default=0.0, ge=0)
    category: ExpenseCategory = ExpenseCategory.SOFTWARE
    date: dt.date
    recurring: bool = False
    notes: str = ""


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    total: float
    percentage: float


class ExpenseSummary(BaseModel):
    period: Period
    count: int
    total: float
    recurring_total: float
    recurring_count: int
    monthly_average: int
    categories: list[CategoryTotal]
