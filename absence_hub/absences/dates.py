"""Calendar-date helpers — chargeable-day counting and range clamping.

All dates are plain calendar dates. Nothing here touches timezones: ISO
strings are split into Y/M/D components by ``date.fromisoformat`` and never
parsed as instants.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Union

from absence_hub.common.constants import WEEKEND_DAYS, CountMode

DateLike = Union[date, str]


def as_date(value: DateLike) -> date:
    """Coerce an ISO ``YYYY-MM-DD`` string (or a date) into a ``date``.

    Malformed strings raise ``ValueError``.
    """
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def count_chargeable_days(from_date: DateLike, to_date: DateLike, mode: CountMode) -> int:
    """Count days in ``[from_date, to_date]`` that consume a balance.

    ``calendar_days`` counts every day; ``business_days`` skips Saturday and
    Sunday. An inverted range yields 0.
    """
    start = as_date(from_date)
    end = as_date(to_date)
    if end < start:
        return 0

    days = 0
    current = start
    while current <= end:
        if mode == CountMode.calendar_days or not is_weekend(current):
            days += 1
        current += timedelta(days=1)
    return days


def clamp_range_to_year(
    from_date: DateLike,
    to_date: DateLike,
    year: int,
) -> Optional[tuple[date, date]]:
    """Intersect ``[from_date, to_date]`` with Jan 1 – Dec 31 of ``year``.

    Returns None when the range does not touch that year.
    """
    start = max(as_date(from_date), date(year, 1, 1))
    end = min(as_date(to_date), date(year, 12, 31))
    if end < start:
        return None
    return start, end


def days_between_inclusive(from_date: DateLike, to_date: DateLike) -> int:
    """Calendar-inclusive day count, never below 1."""
    span = (as_date(to_date) - as_date(from_date)).days + 1
    return max(1, span)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return ``(first_day, first_day_of_next_month)`` — a half-open window."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def overlaps_month(from_date: DateLike, to_date: DateLike, year: int, month: int) -> bool:
    """Half-open overlap test between an inclusive range and a calendar month.

    ``month`` is 1-based.
    """
    month_start, month_end = month_bounds(year, month)
    to_exclusive = as_date(to_date) + timedelta(days=1)
    return as_date(from_date) < month_end and to_exclusive > month_start


def overlaps_year(from_date: DateLike, to_date: DateLike, year: int) -> bool:
    return as_date(from_date) <= date(year, 12, 31) and as_date(to_date) >= date(year, 1, 1)
