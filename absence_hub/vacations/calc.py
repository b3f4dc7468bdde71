"""Client-computed vacation balance for a single year.

Carryover here is an approximation: unused entitlement from prior years
rolls forward up to ``carryover_max_cycles`` years, with no bucket
expiration. The FIFO ledger in ``absence_hub.vacations.ledger`` is exact.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from absence_hub.absences.dates import (
    DateLike,
    clamp_range_to_year,
    count_chargeable_days,
)
from absence_hub.absences.schemas import AbsenceRecord
from absence_hub.common.constants import (
    DEFAULT_CARRYOVER_MAX_CYCLES,
    AbsenceStatus,
    AbsenceType,
    CountMode,
)
from absence_hub.vacations.entitlement import DEFAULT_ENTITLEMENT_RULES, entitlement_for_year
from absence_hub.vacations.schemas import EntitlementRule, VacationBalance, VacationSettings

logger = logging.getLogger(__name__)


def _vacation_days_in_year(
    absences: Iterable[AbsenceRecord],
    year: int,
    count_mode: CountMode,
    status: AbsenceStatus,
) -> int:
    total = 0
    for record in absences:
        if record.type != AbsenceType.vacation or record.status != status:
            continue
        clamped = clamp_range_to_year(record.from_date, record.to_date, year)
        if clamped is None:
            continue
        total += count_chargeable_days(clamped[0], clamped[1], count_mode)
    return total


def used_vacation_days_in_year(
    absences: Iterable[AbsenceRecord],
    year: int,
    count_mode: CountMode = CountMode.business_days,
) -> int:
    return _vacation_days_in_year(absences, year, count_mode, AbsenceStatus.approved)


def reserved_vacation_days_in_year(
    absences: Iterable[AbsenceRecord],
    year: int,
    count_mode: CountMode = CountMode.business_days,
) -> int:
    return _vacation_days_in_year(absences, year, count_mode, AbsenceStatus.pending)


def compute_vacation_balance(
    absences: Sequence[AbsenceRecord],
    current_year: int,
    hire_date: Optional[DateLike],
    settings: Optional[VacationSettings] = None,
    rules: Sequence[EntitlementRule] = DEFAULT_ENTITLEMENT_RULES,
) -> VacationBalance:
    """Entitlement, carryover, usage and availability for ``current_year``.

    Usage counts approved vacation days clamped to the year; reservations
    count pending ones. Carryover walks back ``carryover_max_cycles`` years
    (50 when unset) and only subtracts approved usage; years before the hire
    date count at the lowest tier.
    """
    settings = settings or VacationSettings()
    mode = settings.count_mode

    entitlement = entitlement_for_year(current_year, hire_date, rules)
    used = used_vacation_days_in_year(absences, current_year, mode)
    reserved = reserved_vacation_days_in_year(absences, current_year, mode)

    carryover = 0
    if settings.carryover_enabled:
        cycles = settings.carryover_max_cycles
        if cycles is None:
            cycles = DEFAULT_CARRYOVER_MAX_CYCLES
        for offset in range(1, cycles + 1):
            year = current_year - offset
            unused = (
                entitlement_for_year(year, hire_date, rules)
                - used_vacation_days_in_year(absences, year, mode)
            )
            carryover += max(0, unused)

    available = max(0, entitlement + carryover - used - reserved)
    logger.debug(
        "Vacation %d: entitlement=%d carryover=%d used=%d reserved=%d available=%d",
        current_year, entitlement, carryover, used, reserved, available,
    )

    return VacationBalance(
        entitlement=entitlement,
        carryover=carryover,
        used_this_year=used,
        reserved_this_year=reserved,
        available=available,
    )
