"""FIFO vacation bucket ledger and its adapter to the display shape.

Each calendar year of service grants one bucket that lives for
``accrual_years``. Approved vacation days are debited day by day from the
oldest bucket still alive on that day; expired remainders are lost.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from absence_hub.absences.dates import DateLike, as_date, is_weekend
from absence_hub.absences.schemas import AbsenceRecord
from absence_hub.common.constants import AbsenceStatus, AbsenceType, CountMode
from absence_hub.vacations.entitlement import DEFAULT_ENTITLEMENT_RULES, entitlement_for_year
from absence_hub.vacations.schemas import (
    EntitlementRule,
    VacationBucket,
    VacationInfo,
    VacationLedger,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
DEFAULT_ACCRUAL_YEARS = 3


def add_years(day: date, years: int) -> date:
    """Shift ``day`` by whole years, clamping Feb 29 to Feb 28."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def _chargeable_dates(record: AbsenceRecord, count_mode: CountMode) -> Iterable[date]:
    current = record.from_date
    while current <= record.to_date:
        if count_mode == CountMode.calendar_days or not is_weekend(current):
            yield current
        current += timedelta(days=1)


def _grant_buckets(
    hire: date,
    last_year: int,
    rules: Sequence[EntitlementRule],
    accrual_years: int,
) -> list[VacationBucket]:
    buckets: list[VacationBucket] = []
    for year in range(hire.year, last_year + 1):
        grant_date = hire if year == hire.year else date(year, 1, 1)
        granted = Decimal(entitlement_for_year(year, hire, rules))
        buckets.append(
            VacationBucket(
                grant_date=grant_date,
                expires_at=add_years(grant_date, accrual_years),
                granted=granted,
                used=ZERO,
                remaining=granted,
            )
        )
    return buckets


def _debit_one_day(buckets: list[VacationBucket], day: date) -> bool:
    for bucket in buckets:
        if bucket.is_alive(day) and bucket.remaining > ZERO:
            bucket.used += ONE
            bucket.remaining -= ONE
            return True
    return False


def build_vacation_ledger(
    absences: Iterable[AbsenceRecord],
    hire_date: Optional[DateLike],
    reference_date: DateLike,
    *,
    rules: Sequence[EntitlementRule] = DEFAULT_ENTITLEMENT_RULES,
    accrual_years: int = DEFAULT_ACCRUAL_YEARS,
    count_mode: CountMode = CountMode.business_days,
) -> VacationLedger:
    """Replay approved vacations against yearly grants, oldest bucket first.

    Buckets are granted from the hire year through the reference year. The
    returned ledger holds the buckets alive on ``reference_date`` and their
    totals. Without a hire date the ledger is empty.
    """
    if hire_date is None:
        return VacationLedger()

    hire = as_date(hire_date)
    reference = as_date(reference_date)
    if reference < hire:
        return VacationLedger()

    buckets = _grant_buckets(hire, reference.year, rules, accrual_years)

    approved = sorted(
        (
            a for a in absences
            if a.type == AbsenceType.vacation and a.status == AbsenceStatus.approved
        ),
        key=lambda a: (a.from_date, a.id),
    )
    for record in approved:
        uncovered = 0
        for day in _chargeable_dates(record, count_mode):
            if not _debit_one_day(buckets, day):
                uncovered += 1
        if uncovered:
            logger.warning(
                "Vacation %s exceeds the available buckets by %d day(s)", record.id, uncovered,
            )

    alive = [b for b in buckets if b.is_alive(reference)]
    expiring = [b.expires_at for b in alive if b.remaining > ZERO]

    return VacationLedger(
        available=sum((b.remaining for b in alive), ZERO),
        granted=sum((b.granted for b in alive), ZERO),
        used=sum((b.used for b in alive), ZERO),
        next_expiration=min(expiring) if expiring else None,
        buckets=alive,
    )


def current_bucket(
    buckets: Iterable[VacationBucket],
    reference_date: DateLike,
) -> Optional[VacationBucket]:
    """Most recently granted bucket alive on ``reference_date``."""
    reference = as_date(reference_date)
    alive = [b for b in buckets if b.is_alive(reference)]
    if not alive:
        return None
    return max(alive, key=lambda b: b.grant_date)


def vacation_info_from_ledger(
    ledger: Optional[VacationLedger],
    reference_date: DateLike,
) -> Optional[VacationInfo]:
    """Read a bucket ledger as entitlement / carryover / used / available.

    Entitlement is the current bucket's grant; carryover is what remains in
    buckets granted before it. Used and available come from the ledger
    totals, which are already FIFO-correct across the window.
    """
    if ledger is None:
        return None

    if not ledger.buckets:
        return VacationInfo(
            entitlement=ZERO,
            carryover=ZERO,
            used_this_year=ledger.used,
            available=ledger.available,
        )

    current = current_bucket(ledger.buckets, reference_date)
    entitlement = current.granted if current else ZERO
    if current is None:
        carryover = ZERO
    else:
        carryover = sum(
            (b.remaining for b in ledger.buckets if b.grant_date < current.grant_date),
            ZERO,
        )

    return VacationInfo(
        entitlement=entitlement,
        carryover=carryover,
        used_this_year=ledger.used,
        available=ledger.available,
    )
