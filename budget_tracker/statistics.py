"""Aggregate income and expense figures for a reporting period.

Everything here works on lists already loaded from a store, the same way the
statistics view summed what it had on screen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List

from budget_tracker.core.constants import UNCATEGORIZED
from budget_tracker.core.models import Category, FilterPeriod, Transaction, TransactionType
from budget_tracker.utils import days_in_period, filter_by_period, period_start


@dataclass
class Statistics:
    period: FilterPeriod
    start: datetime
    end: datetime
    total_income: float = 0.0
    total_expense: float = 0.0
    expenses_by_category: Dict[str, float] = field(default_factory=dict)
    incomes_by_category: Dict[str, float] = field(default_factory=dict)
    income_by_day: Dict[str, float] = field(default_factory=dict)
    expense_by_day: Dict[str, float] = field(default_factory=dict)
    transactions: int = 0

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense

    def to_dict(self) -> Dict[str, object]:
        return {
            "period": self.period.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "transactions": self.transactions,
            "total_income": self.total_income,
            "total_expense": self.total_expense,
            "balance": self.balance,
            "expenses_by_category": category_breakdown(self.expenses_by_category),
            "incomes_by_category": category_breakdown(self.incomes_by_category),
            "income_by_day": dict(self.income_by_day),
            "expense_by_day": dict(self.expense_by_day),
        }


def category_breakdown(totals: Dict[str, float]) -> List[Dict[str, object]]:
    """Rows sorted by total, largest first, each with its percentage share."""
    grand_total = sum(totals.values())
    rows = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        {
            "category": name,
            "total": total,
            "share": (total / grand_total * 100) if grand_total else 0.0,
        }
        for name, total in rows
    ]


def compute_statistics(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    period: FilterPeriod | str = FilterPeriod.MONTH,
    now: datetime | None = None,
) -> Statistics:
    now = now or datetime.now()
    period = FilterPeriod(period)
    start = period_start(period, now)
    names = {c.id: c.name for c in categories}

    stats = Statistics(period=period, start=start, end=now)
    selected = filter_by_period(transactions, period, now)
    stats.transactions = len(selected)

    for tx in selected:
        name = names.get(tx.category_id, UNCATEGORIZED)
        if tx.type is TransactionType.INCOME:
            stats.total_income += tx.amount
            stats.incomes_by_category[name] = stats.incomes_by_category.get(name, 0.0) + tx.amount
        else:
            stats.total_expense += tx.amount
            stats.expenses_by_category[name] = stats.expenses_by_category.get(name, 0.0) + tx.amount

    # Zero-filled daily series from the period start through today
    for day in days_in_period(start, now):
        key = day.strftime("%Y-%m-%d")
        stats.income_by_day[key] = 0.0
        stats.expense_by_day[key] = 0.0
    for tx in selected:
        key = tx.date.strftime("%Y-%m-%d")
        series = stats.income_by_day if tx.type is TransactionType.INCOME else stats.expense_by_day
        if key in series:
            series[key] += tx.amount

    return stats
