"""Absence service layer — policy lookup, balances, overlap, validation, transitions.

Business logic:
  - Stats / usage / history over a caller-supplied absence list
  - Vacation row merged from the seniority-based balance when a hire date is known
  - Pre-submission validation returning the deduction a request would consume
  - Status transitions with decision audit fields

Nothing here persists anything; the data service owns storage.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence

from absence_hub.absences.overlap import find_overlapping_absence
from absence_hub.absences.policies import POLICIES, build_deduction
from absence_hub.absences.schemas import (
    AbsenceCandidate,
    AbsenceRecord,
    BalanceStatsOut,
    Deduction,
    HistoryRow,
    PolicyDefinition,
    UsageOut,
)
from absence_hub.absences.stats import (
    build_balance_summary,
    build_history_rows,
    compute_balance_stats_by_key,
    compute_usage_by_balance_key,
)
from absence_hub.absences.validation import transition_status, validate_absence_request
from absence_hub.common.constants import AbsenceStatus
from absence_hub.config import settings
from absence_hub.vacations.calc import compute_vacation_balance


# ═════════════════════════════════════════════════════════════════════
# AbsenceService
# ═════════════════════════════════════════════════════════════════════


class AbsenceService:
    """Stateless absence operations over in-memory records."""

    @staticmethod
    def get_policies() -> list[PolicyDefinition]:
        return list(POLICIES)

    @staticmethod
    def get_balance_stats(
        absences: Sequence[AbsenceRecord],
        year: int,
        month: Optional[int] = None,
        hire_date: Optional[date] = None,
    ) -> BalanceStatsOut:
        """Per-key stats plus a summary of every tracked balance."""
        mode = settings.VACATION_COUNT_MODE
        stats = compute_balance_stats_by_key(absences, year, month, mode)

        vacation = None
        if hire_date is not None:
            vacation = compute_vacation_balance(
                absences, year, hire_date, settings.vacation_settings(),
            ).to_info()

        return BalanceStatsOut(
            year=year,
            month=month,
            balances=list(stats.values()),
            summary=build_balance_summary(stats, vacation),
        )

    @staticmethod
    def get_usage(absences: Sequence[AbsenceRecord], year: int) -> UsageOut:
        usage = compute_usage_by_balance_key(absences, year, settings.VACATION_COUNT_MODE)
        return UsageOut(year=year, usage=usage)

    @staticmethod
    def get_history(
        absences: Sequence[AbsenceRecord],
        year: int,
        month: Optional[int] = None,
    ) -> list[HistoryRow]:
        return build_history_rows(absences, year, month, settings.VACATION_COUNT_MODE)

    @staticmethod
    def find_overlap(
        absences: Sequence[AbsenceRecord],
        from_date: date,
        to_date: date,
        ignore_id: Optional[str] = None,
        statuses: Optional[Sequence[AbsenceStatus]] = None,
    ) -> Optional[AbsenceRecord]:
        return find_overlapping_absence(
            absences, from_date, to_date, ignore_id=ignore_id, statuses=statuses,
        )

    @staticmethod
    def validate_request(
        candidate: AbsenceCandidate,
        absences: Sequence[AbsenceRecord],
        year: Optional[int] = None,
        vacation_available: Optional[Decimal] = None,
    ) -> Optional[Deduction]:
        return validate_absence_request(
            candidate,
            absences,
            year=year,
            vacation_available=vacation_available,
            count_mode=settings.VACATION_COUNT_MODE,
        )

    @staticmethod
    def get_deduction(absence: AbsenceRecord) -> Optional[Deduction]:
        """Deduction to record alongside an approval."""
        return build_deduction(absence, settings.VACATION_COUNT_MODE)

    @staticmethod
    def change_status(
        absence: AbsenceRecord,
        status: AbsenceStatus,
        actor_id: str,
        at: Optional[datetime] = None,
    ) -> AbsenceRecord:
        """Apply a status transition, stamping the current UTC time when ``at`` is omitted."""
        return transition_status(
            absence, status, actor_id=actor_id, at=at or datetime.now(timezone.utc),
        )

