"""Vacation router — entitlement, single-year balance, FIFO ledger, unified info."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from absence_hub.vacations.schemas import (
    EntitlementOut,
    VacationBalance,
    VacationBalanceRequest,
    VacationInfo,
    VacationInfoRequest,
    VacationLedger,
    VacationLedgerRequest,
)
from absence_hub.vacations.service import VacationService

router = APIRouter(prefix="", tags=["vacations"])


# ── GET /entitlement ────────────────────────────────────────────────

@router.get("/entitlement", response_model=EntitlementOut)
async def get_entitlement(
    year: int = Query(..., ge=1900, le=9999),
    hire_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
):
    """Years of service at year end and the resulting annual entitlement."""
    return VacationService.get_entitlement(year, hire_date)


# ── POST /balance ───────────────────────────────────────────────────

@router.post("/balance", response_model=VacationBalance)
async def get_balance(body: VacationBalanceRequest):
    """Client-computed balance: entitlement, carryover, used, reserved, available."""
    return VacationService.get_balance(
        body.absences, body.year, body.hire_date, body.settings,
    )


# ── POST /ledger ────────────────────────────────────────────────────

@router.post("/ledger", response_model=VacationLedger)
async def get_ledger(body: VacationLedgerRequest):
    """FIFO bucket ledger as of the reference date."""
    return VacationService.get_ledger(
        body.absences, body.hire_date, body.reference_date, body.accrual_years,
    )


# ── POST /info ──────────────────────────────────────────────────────

@router.post("/info", response_model=Optional[VacationInfo])
async def get_info(body: VacationInfoRequest):
    """Display figures from either a client-computed or a ledger source."""
    return VacationService.resolve_info(body.source, body.reference_date)
