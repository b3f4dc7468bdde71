"""Balance and usage aggregation over a user's absences.

Business logic:
  - Per-key stats: approved → used, pending → reserved, rejected ignored
  - Approved-only usage for pre-submission quota checks
  - History rows for detail tables and exports
  - Dashboard summary: vacation first, capped balances by consumption
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from absence_hub.absences.dates import overlaps_month, overlaps_year
from absence_hub.absences.policies import (
    amount_for_absence,
    policy_for_absence,
    policy_for_balance_key,
    tracked_balance_keys,
)
from absence_hub.absences.schemas import (
    AbsenceRecord,
    BalanceStats,
    BalanceSummaryRow,
    HistoryRow,
    Usage,
)
from absence_hub.common.constants import (
    ACTIVE_STATUSES,
    AbsenceStatus,
    AbsenceType,
    BalanceKey,
    CountMode,
    PolicyUnit,
)
from absence_hub.vacations.schemas import VacationInfo

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def available_for(
    allowance: Optional[Decimal],
    used: Decimal,
    reserved: Decimal = ZERO,
) -> Optional[Decimal]:
    """``allowance - used - reserved`` clamped at zero; None when uncapped."""
    if allowance is None:
        return None
    return max(ZERO, allowance - used - reserved)


def _in_window(record: AbsenceRecord, year: int, month: Optional[int]) -> bool:
    if month is None:
        return overlaps_year(record.from_date, record.to_date, year)
    return overlaps_month(record.from_date, record.to_date, year, month)


def _relevant(
    absences: Iterable[AbsenceRecord],
    year: int,
    month: Optional[int],
) -> list[AbsenceRecord]:
    return [
        a for a in absences
        if a.status in ACTIVE_STATUSES and _in_window(a, year, month)
    ]


def compute_balance_stats_by_key(
    absences: Iterable[AbsenceRecord],
    year: int,
    month: Optional[int] = None,
    count_mode: CountMode = CountMode.business_days,
) -> dict[BalanceKey, BalanceStats]:
    """Fold approved and pending absences into per-balance stats.

    ``month`` (1-based) restricts the window to records overlapping that
    month; otherwise records overlapping ``year`` are included. Ranges are
    not clamped to the window.
    """
    stats: dict[BalanceKey, BalanceStats] = {}

    for record in _relevant(absences, year, month):
        policy = policy_for_absence(record)
        if policy is None or not policy.deducts or policy.deducts_from is None:
            if policy is None:
                logger.debug(
                    "No policy for absence %s (%s/%s); skipped",
                    record.id, record.type.value, record.subtype,
                )
            continue

        entry = stats.get(policy.deducts_from)
        if entry is None:
            entry = BalanceStats(
                balance_key=policy.deducts_from,
                unit=policy.unit,
                allowance=policy.allowance,
            )
            stats[policy.deducts_from] = entry

        amount = amount_for_absence(record, policy, count_mode)
        if record.status == AbsenceStatus.approved:
            entry.used += amount
        else:
            entry.reserved += amount

    # Derive availability once everything is folded in.
    for entry in stats.values():
        entry.available = available_for(entry.allowance, entry.used, entry.reserved)

    return stats


def compute_usage_by_balance_key(
    absences: Iterable[AbsenceRecord],
    year: int,
    count_mode: CountMode = CountMode.business_days,
) -> dict[BalanceKey, Usage]:
    """Approved consumption per balance key for absences starting in ``year``."""
    usage: dict[BalanceKey, Usage] = {}

    for record in absences:
        if record.status != AbsenceStatus.approved:
            continue
        if record.from_date.year != year:
            continue

        policy = policy_for_absence(record)
        if policy is None or not policy.deducts or policy.deducts_from is None:
            continue

        amount = amount_for_absence(record, policy, count_mode)
        previous = usage.get(policy.deducts_from)
        used = amount if previous is None else previous.used + amount
        usage[policy.deducts_from] = Usage(used=used, unit=policy.unit)

    return usage


def build_history_rows(
    absences: Iterable[AbsenceRecord],
    year: int,
    month: Optional[int] = None,
    count_mode: CountMode = CountMode.business_days,
) -> list[HistoryRow]:
    """One row per deducting absence in the window, newest first."""
    rows: list[HistoryRow] = []

    for record in _relevant(absences, year, month):
        policy = policy_for_absence(record)
        if policy is None or not policy.deducts or policy.deducts_from is None:
            continue

        if record.type == AbsenceType.license:
            label = record.subtype.value if record.subtype else AbsenceType.license.value
        else:
            label = record.type.value

        rows.append(
            HistoryRow(
                id=record.id,
                date_from=record.from_date,
                date_to=record.to_date,
                type=label,
                status=record.status,
                balance_key=policy.deducts_from,
                unit=policy.unit,
                amount=amount_for_absence(record, policy, count_mode),
                note=record.note,
            )
        )

    rows.sort(key=lambda r: (r.date_from, r.id), reverse=True)
    return rows


def consumed_pct(used: Decimal, allowance: Optional[Decimal]) -> Decimal:
    """Share of ``allowance`` already used, 0..100; 0 when uncapped or empty."""
    if allowance is None or allowance <= 0:
        return ZERO
    return min(HUNDRED, max(ZERO, used / allowance * HUNDRED))


def build_balance_summary(
    stats: dict[BalanceKey, BalanceStats],
    vacation: Optional[VacationInfo] = None,
) -> list[BalanceSummaryRow]:
    """Dashboard rows: vacation first, then every capped balance.

    The vacation row only appears when ``vacation`` is given and uses the
    seniority-based figures (allowance = entitlement + carryover). Uncapped
    balances are left out. Capped rows include keys with no movements and
    are ordered most consumed first; ties keep catalog order.
    """
    rows: list[BalanceSummaryRow] = []

    for key in tracked_balance_keys():
        if key == BalanceKey.vacation_days:
            continue
        policy = policy_for_balance_key(key)
        if policy is None or policy.allowance is None:
            continue

        entry = stats.get(key)
        used = entry.used if entry else ZERO
        reserved = entry.reserved if entry else ZERO
        rows.append(
            BalanceSummaryRow(
                balance_key=key,
                label=policy.label,
                unit=policy.unit,
                allowance=policy.allowance,
                used=used,
                reserved=reserved,
                available=available_for(policy.allowance, used, reserved),
            )
        )

    rows.sort(key=lambda r: consumed_pct(r.used, r.allowance), reverse=True)

    if vacation is not None:
        vacation_policy = policy_for_balance_key(BalanceKey.vacation_days)
        rows.insert(
            0,
            BalanceSummaryRow(
                balance_key=BalanceKey.vacation_days,
                label=vacation_policy.label if vacation_policy else BalanceKey.vacation_days.value,
                unit=PolicyUnit.day,
                allowance=vacation.entitlement + vacation.carryover,
                used=vacation.used_this_year,
                reserved=vacation.reserved_this_year,
                available=vacation.available,
            ),
        )

    return rows
