"""Seniority-based annual vacation entitlement."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from absence_hub.absences.dates import DateLike, as_date
from absence_hub.vacations.schemas import EntitlementRule

logger = logging.getLogger(__name__)

DEFAULT_ENTITLEMENT_RULES: tuple[EntitlementRule, ...] = (
    EntitlementRule(min_years=0, days=14),
    EntitlementRule(min_years=5, days=21),
    EntitlementRule(min_years=10, days=28),
    EntitlementRule(min_years=20, days=35),
)


def years_of_service(hire_date: DateLike, as_of: DateLike) -> int:
    """Completed years between ``hire_date`` and ``as_of``, never negative."""
    start = as_date(hire_date)
    end = as_date(as_of)
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return max(0, years)


def years_of_service_at_year_end(year: int, hire_date: DateLike) -> int:
    """Completed years of service as of December 31 of ``year``."""
    return years_of_service(hire_date, date(year, 12, 31))


def entitlement_days_for_years(
    years: int,
    rules: Sequence[EntitlementRule] = DEFAULT_ENTITLEMENT_RULES,
) -> int:
    """Days granted for ``years`` of service: the highest threshold reached wins."""
    ordered = sorted(rules, key=lambda r: r.min_years)
    if not ordered:
        return 0

    days = ordered[0].days
    for rule in ordered:
        if years >= rule.min_years:
            days = rule.days
    return days


def entitlement_for_year(
    year: int,
    hire_date: Optional[DateLike],
    rules: Sequence[EntitlementRule] = DEFAULT_ENTITLEMENT_RULES,
) -> int:
    """Annual entitlement for ``year``.

    Without a hire date the employee is treated as having 0 years of
    service, which grants the lowest tier.
    """
    if hire_date is None:
        logger.debug("No hire date; entitlement for %d uses 0 years of service", year)
        years = 0
    else:
        years = years_of_service_at_year_end(year, hire_date)
    return entitlement_days_for_years(years, rules)
