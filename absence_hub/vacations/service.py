"""Vacation service layer — entitlement, client-computed balance, FIFO ledger.

Both balance models are resolved through ``VacationService.resolve_info`` so
callers never branch on where the figures came from.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from absence_hub.absences.schemas import AbsenceRecord
from absence_hub.config import settings
from absence_hub.vacations.calc import compute_vacation_balance
from absence_hub.vacations.entitlement import (
    entitlement_for_year,
    years_of_service_at_year_end,
)
from absence_hub.vacations.ledger import build_vacation_ledger, vacation_info_from_ledger
from absence_hub.vacations.schemas import (
    ClientComputed,
    EntitlementOut,
    ServerLedger,
    VacationBalance,
    VacationBalanceSource,
    VacationInfo,
    VacationLedger,
    VacationSettings,
)


# ═════════════════════════════════════════════════════════════════════
# VacationService
# ═════════════════════════════════════════════════════════════════════


class VacationService:
    """Stateless vacation balance operations."""

    @staticmethod
    def get_entitlement(year: int, hire_date: Optional[date]) -> EntitlementOut:
        years = years_of_service_at_year_end(year, hire_date) if hire_date else 0
        return EntitlementOut(
            year=year,
            hire_date=hire_date,
            years_of_service=years,
            entitlement_days=entitlement_for_year(year, hire_date),
        )

    @staticmethod
    def get_balance(
        absences: Sequence[AbsenceRecord],
        year: int,
        hire_date: Optional[date],
        vacation_settings: Optional[VacationSettings] = None,
    ) -> VacationBalance:
        return compute_vacation_balance(
            absences, year, hire_date, vacation_settings or settings.vacation_settings(),
        )

    @staticmethod
    def get_ledger(
        absences: Sequence[AbsenceRecord],
        hire_date: Optional[date],
        reference_date: date,
        accrual_years: Optional[int] = None,
    ) -> VacationLedger:
        return build_vacation_ledger(
            absences,
            hire_date,
            reference_date,
            accrual_years=accrual_years or settings.VACATION_ACCRUAL_YEARS,
            count_mode=settings.VACATION_COUNT_MODE,
        )

    @staticmethod
    def resolve_info(
        source: VacationBalanceSource,
        reference_date: date,
    ) -> Optional[VacationInfo]:
        """Display figures for either balance model.

        Returns None only when a ledger source carries no ledger at all.
        """
        if isinstance(source, ServerLedger):
            return vacation_info_from_ledger(source.ledger, reference_date)

        if isinstance(source, ClientComputed):
            balance = compute_vacation_balance(
                source.absences,
                source.current_year,
                source.hire_date,
                source.settings or settings.vacation_settings(),
            )
            return balance.to_info()

        raise TypeError(f"Unsupported vacation balance source: {type(source).__name__}")
