"""Expense tracking and per-period aggregation."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any

from pydantic import ValidationError

from visionboard.errors import InvalidInput, NotFound
from visionboard.events.bus import EventBus
from visionboard.events.types import EventType
from visionboard.models.base import parse_amount, require_text, round_half_up
from visionboard.models.expense import (
    CategoryTotal,
    Expense,
    ExpenseCategory,
    ExpenseSummary,
    Period,
)
from visionboard.storage.base import EntityStore

logger = logging.getLogger(__name__)

ENTITY = Expense.entity


class ExpenseService:
    def __init__(self, store: EntityStore, event_bus: EventBus) -> None:
        self._store = store
        self._event_bus = event_bus

    async def record(
        self,
        *,
        description: str,
        amount: Any,
        category: ExpenseCategory | str = ExpenseCategory.SOFTWARE,
        on: date | None = None,
        recurring: bool = False,
        notes: str = "",
    ) -> Expense:
        """Record an expense. Amounts that do not parse are stored as 0."""
        try:
            expense = Expense(
                description=require_text(description, "description"),
                amount=parse_amount(amount),
                category=category,
                date=on or date.today(),
                recurring=recurring,
                notes=notes,
            )
        except ValidationError as e:
            raise InvalidInput(str(e)) from e

        data = await self._store.create(ENTITY, expense.to_storage())
        created = Expense(**data)
        logger.info("Recorded expense %s: %.2f (%s)", created.id, created.amount, created.category)
        await self._event_bus.emit(
            EventType.EXPENSE_RECORDED, {"expense_id": created.id, "amount": created.amount}
        )
        return created

    async def list_expenses(self) -> list[Expense]:
        return [Expense(**d) for d in await self._store.list(ENTITY, "-date")]

    async def delete(self, expense_id: str) -> None:
        if await self._store.get(ENTITY, expense_id) is None:
            raise NotFound(ENTITY, expense_id)
        await self._store.delete(ENTITY, expense_id)
        logger.info("Deleted expense: id=%s", expense_id)
        await self._event_bus.emit(EventType.EXPENSE_DELETED, {"expense_id": expense_id})

    async def summarize(
        self, period: Period | str = Period.ALL, *, today: date | None = None
    ) -> ExpenseSummary:
        return summarize(await self.list_expenses(), period, today=today)


def in_period(expense: Expense, period: Period, today: date) -> bool:
    if period == Period.MONTH:
        return (expense.date.year, expense.date.month) == (today.year, today.month)
    if period == Period.YEAR:
        return expense.date.year == today.year
    return True


def summarize(
    expenses: list[Expense], period: Period | str = Period.ALL, *, today: date | None = None
) -> ExpenseSummary:
    """Totals for the period, with categories ordered largest first."""
    try:
        period = Period(period)
    except ValueError as e:
        raise InvalidInput(f"Invalid period: {period}") from e
    today = today or date.today()

    selected = [e for e in expenses if in_period(e, period, today)]
    total = sum(e.amount for e in selected)

    by_category: dict[ExpenseCategory, float] = defaultdict(float)
    for e in selected:
        by_category[e.category] += e.amount

    categories = [
        CategoryTotal(
            category=category,
            total=amount,
            percentage=(amount / total * 100) if total else 0.0,
        )
        for category, amount in sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
    ]

    recurring = [e for e in selected if e.recurring]
    # a year is averaged over twelve months; other periods report the total
    monthly = total / 12 if period == Period.YEAR else total

    return ExpenseSummary(
        period=period,
        count=len(selected),
        total=total,
        recurring_total=sum(e.amount for e in recurring),
        recurring_count=len(recurring),
        monthly_average=round_half_up(monthly),
        categories=categories,
    )
