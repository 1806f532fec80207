from datetime import datetime

import pytest

from budget_tracker.core.models import Category, FilterPeriod, Transaction, TransactionType
from budget_tracker.statistics import category_breakdown, compute_statistics
from budget_tracker.utils import add_months, days_in_period, filter_by_period, period_start

NOW = datetime(2025, 3, 15, 12, 0)

CATEGORIES = [
    Category(id=1, name="Еда и продукты", name_kz="Тамақ", icon="restaurant",
             color_hex="#FF6B6B", type=TransactionType.EXPENSE),
    Category(id=2, name="Транспорт", name_kz="Көлік", icon="directions_bus",
             color_hex="#4ECDC4", type=TransactionType.EXPENSE),
    Category(id=9, name="Зарплата", name_kz="Жалақы", icon="payments",
             color_hex="#00B894", type=TransactionType.INCOME),
]


def _tx(amount, day, category_id=1, tx_type=TransactionType.EXPENSE):
    return Transaction(amount=amount, date=day, category_id=category_id, type=tx_type)


def test_period_start():
    assert period_start(FilterPeriod.WEEK, NOW) == datetime(2025, 3, 8, 12, 0)
    assert period_start("month", NOW) == datetime(2025, 2, 15)
    assert period_start("year", NOW) == datetime(2024, 3, 15)
    assert period_start("all", NOW) == datetime(2020, 1, 1)


def test_period_start_clamps_month_end():
    assert period_start("month", datetime(2025, 3, 31)) == datetime(2025, 2, 28)
    assert period_start("year", datetime(2024, 2, 29)) == datetime(2023, 2, 28)
    assert add_months(datetime(2024, 12, 15), 1) == datetime(2025, 1, 15)


def test_filter_by_period_excludes_start_instant():
    start = period_start("week", NOW)
    txs = [_tx(1, start), _tx(2, datetime(2025, 3, 9))]
    assert [t.amount for t in filter_by_period(txs, "week", NOW)] == [2]
    assert len(filter_by_period(txs, "all", NOW)) == 2


def test_month_period_keeps_morning_of_boundary_day():
    morning = _tx(300, datetime(2025, 2, 15, 8, 0))
    assert filter_by_period([morning], "month", NOW) == [morning]

    stats = compute_statistics([morning], CATEGORIES, "month", NOW)
    assert list(stats.expense_by_day)[0] == "2025-02-15"
    assert stats.expense_by_day["2025-02-15"] == 300
    assert stats.total_expense == 300


def test_days_in_period_is_inclusive():
    days = days_in_period(datetime(2025, 3, 1), datetime(2025, 3, 3))
    assert [d.day for d in days] == [1, 2, 3]


def test_compute_statistics_totals_and_categories():
    txs = [
        _tx(300000, datetime(2025, 3, 1), 9, TransactionType.INCOME),
        _tx(12000, datetime(2025, 3, 2), 1),
        _tx(8000, datetime(2025, 3, 14), 1),
        _tx(5000, datetime(2025, 3, 14), 2),
        _tx(700, datetime(2025, 3, 10), 42),
        _tx(99999, datetime(2024, 1, 1), 1),
    ]
    stats = compute_statistics(txs, CATEGORIES, FilterPeriod.MONTH, NOW)

    assert stats.transactions == 5
    assert stats.total_income == 300000
    assert stats.total_expense == 25700
    assert stats.balance == 274300
    assert stats.expenses_by_category == {
        "Еда и продукты": 20000,
        "Транспорт": 5000,
        "Без категории": 700,
    }
    assert stats.incomes_by_category == {"Зарплата": 300000}


def test_compute_statistics_daily_series_is_zero_filled():
    txs = [
        _tx(1000, datetime(2025, 3, 14, 8), 1),
        _tx(500, datetime(2025, 3, 14, 20), 2),
        _tx(2000, datetime(2025, 3, 12), 9, TransactionType.INCOME),
    ]
    stats = compute_statistics(txs, CATEGORIES, "week", NOW)

    assert list(stats.expense_by_day)[0] == "2025-03-08"
    assert list(stats.expense_by_day)[-1] == "2025-03-15"
    assert len(stats.expense_by_day) == 8
    assert stats.expense_by_day["2025-03-14"] == 1500
    assert stats.expense_by_day["2025-03-13"] == 0.0
    assert stats.income_by_day["2025-03-12"] == 2000


def test_compute_statistics_empty():
    stats = compute_statistics([], CATEGORIES, "month", NOW)
    assert stats.balance == 0.0
    assert stats.expenses_by_category == {}
    payload = stats.to_dict()
    assert payload["period"] == "month"
    assert payload["expenses_by_category"] == []


def test_category_breakdown_shares():
    rows = category_breakdown({"A": 25.0, "B": 75.0})
    assert [r["category"] for r in rows] == ["B", "A"]
    assert rows[0]["share"] == pytest.approx(75.0)
    assert category_breakdown({}) == []
