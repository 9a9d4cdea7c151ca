"""Purchase schedule generation and date helpers."""
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import List

from .models import Frequency

DAYS_IN_WEEK = 7
DAYS_IN_BIWEEK = 14
MONTHS_PER_YEAR = 12


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def add_months(d: date, months: int, *, day: int | None = None) -> date:
    """Shift ``d`` by ``months`` calendar months.

    The day of month is ``day`` (or ``d.day``), clamped to the length of the
    target month, so Jan 31 + 1 month is Feb 28/29 rather than early March.
    """

    month_index = d.month - 1 + months
    year = d.year + month_index // MONTHS_PER_YEAR
    month = month_index % MONTHS_PER_YEAR + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day or d.day, last_day))


def generate_purchase_dates(
    start: date | datetime,
    end: date | datetime,
    frequency: Frequency | str,
) -> List[date]:
    """Return every purchase date from ``start`` to ``end``, both inclusive.

    Monthly schedules keep the start date's day of month; short months clamp to
    their last day. An empty list means ``start`` is after ``end``.
    """

    frequency = Frequency(frequency)
    start_day = _as_date(start)
    end_day = _as_date(end)

    dates: List[date] = []
    current = start_day
    months_elapsed = 0
    while current <= end_day:
        dates.append(current)
        if frequency is Frequency.DAILY:
            current = current + timedelta(days=1)
        elif frequency is Frequency.WEEKLY:
            current = current + timedelta(days=DAYS_IN_WEEK)
        elif frequency is Frequency.BIWEEKLY:
            current = current + timedelta(days=DAYS_IN_BIWEEK)
        elif frequency is Frequency.MONTHLY:
            months_elapsed += 1
            current = add_months(start_day, months_elapsed)
        else:  # pragma: no cover - Frequency() above rejects unknown values
            raise ValueError(f"Invalid frequency: {frequency}")
    return dates


def days_between(start: date | datetime, end: date | datetime) -> int:
    return (_as_date(end) - _as_date(start)).days


def estimate_purchase_count(
    start: date | datetime,
    end: date | datetime,
    frequency: Frequency | str,
) -> int:
    """Cheap upper-bound estimate of the schedule length, used for request sizing."""

    frequency = Frequency(frequency)
    days = days_between(start, end)
    if days < 0:
        return 0
    if frequency is Frequency.DAILY:
        return days + 1
    if frequency is Frequency.WEEKLY:
        return days // DAYS_IN_WEEK + 1
    if frequency is Frequency.BIWEEKLY:
        return days // DAYS_IN_BIWEEK + 1
    start_day, end_day = _as_date(start), _as_date(end)
    months = (end_day.year - start_day.year) * MONTHS_PER_YEAR + (end_day.month - start_day.month)
    return months + 1


def to_unix_timestamp(d: date | datetime) -> int:
    """Return epoch seconds for UTC midnight of ``d``."""

    day = _as_date(d)
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp())


def from_unix_timestamp(ts: float) -> date:
    return datetime.fromtimestamp(ts, tz=timezone.utc).date()


__all__ = [
    "add_months",
    "generate_purchase_dates",
    "days_between",
    "estimate_purchase_count",
    "to_unix_timestamp",
    "from_unix_timestamp",
]
