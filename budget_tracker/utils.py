# budget_tracker/utils.py
from calendar import monthrange
from collections import OrderedDict
from datetime import datetime, timedelta

from budget_tracker.core.constants import MIN_DATE
from budget_tracker.core.models import FilterPeriod


def add_months(original: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = original.month - 1 + months
    year = original.year + month_index // 12
    month = month_index % 12 + 1
    day = min(original.day, monthrange(year, month)[1])
    return original.replace(year=year, month=month, day=day)


def _midnight(moment):
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def period_start(period, now=None):
    """
    Return the moment a period filter starts from, relative to *now*.

    Month and year starts fall on midnight of the shifted date; the week
    start keeps the time of day.
    """
    now = now or datetime.now()
    period = FilterPeriod(period)
    if period is FilterPeriod.WEEK:
        return now - timedelta(days=7)
    if period is FilterPeriod.MONTH:
        return _midnight(add_months(now, -1))
    if period is FilterPeriod.YEAR:
        return _midnight(add_months(now, -12))
    return MIN_DATE


def filter_by_period(transactions, period, now=None):
    """
    Keep transactions dated strictly after the period start. ``all`` keeps everything.
    """
    if FilterPeriod(period) is FilterPeriod.ALL:
        return list(transactions)
    start = period_start(period, now)
    return [tx for tx in transactions if tx.date > start]


def days_in_period(start: datetime, end: datetime):
    """
    Every day from *start* to *end* inclusive, stepping one day at a time.
    """
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def group_by_day(transactions):
    """
    Group transactions under ``YYYY-MM-DD`` keys, newest day first.
    """
    grouped = OrderedDict()
    for tx in sorted(transactions, key=lambda t: t.date, reverse=True):
        grouped.setdefault(tx.date.strftime('%Y-%m-%d'), []).append(tx)
    return grouped
