"""Absence router — policies, balances, usage, history, overlap, validation, transitions.

Every endpoint is stateless: the caller posts the absences it already
fetched from the data service and gets computed results back.
"""

from typing import Optional

from fastapi import APIRouter, Request

from absence_hub.absences.schemas import (
    AbsenceRecord,
    BalanceStatsOut,
    BalanceStatsRequest,
    Deduction,
    DeductionRequest,
    HistoryRequest,
    HistoryRow,
    OverlapOut,
    OverlapRequest,
    PolicyDefinition,
    TransitionRequest,
    UsageOut,
    UsageRequest,
    ValidateRequest,
    ValidationOut,
)
from absence_hub.absences.service import AbsenceService
from absence_hub.common.rate_limit import limiter

router = APIRouter(prefix="", tags=["absences"])


# ── GET /policies ───────────────────────────────────────────────────

@router.get("/policies", response_model=list[PolicyDefinition])
async def get_policies():
    """List the absence policy catalog."""
    return AbsenceService.get_policies()


# ── POST /balances ──────────────────────────────────────────────────

@router.post("/balances", response_model=BalanceStatsOut)
async def get_balances(body: BalanceStatsRequest):
    """Used / reserved / available per balance for a year or month."""
    return AbsenceService.get_balance_stats(
        body.absences, body.year, month=body.month, hire_date=body.hire_date,
    )


# ── POST /usage ─────────────────────────────────────────────────────

@router.post("/usage", response_model=UsageOut)
async def get_usage(body: UsageRequest):
    """Approved consumption per balance for absences starting in the year."""
    return AbsenceService.get_usage(body.absences, body.year)


# ── POST /history ───────────────────────────────────────────────────

@router.post("/history", response_model=list[HistoryRow])
async def get_history(body: HistoryRequest):
    """Deducting absences in the window, newest first."""
    return AbsenceService.get_history(body.absences, body.year, month=body.month)


# ── POST /overlap ───────────────────────────────────────────────────

@router.post("/overlap", response_model=OverlapOut)
async def find_overlap(body: OverlapRequest):
    """First existing absence colliding with the candidate range, if any."""
    conflict = AbsenceService.find_overlap(
        body.absences,
        body.from_date,
        body.to_date,
        ignore_id=body.ignore_id,
        statuses=body.statuses,
    )
    return OverlapOut(conflict=conflict)


# ── POST /validate ──────────────────────────────────────────────────

@router.post("/validate", response_model=ValidationOut)
@limiter.limit("30/minute")
async def validate_request(request: Request, body: ValidateRequest):
    """Validate a new or edited request. Checks dates, hours, overlap and quota."""
    deduction = AbsenceService.validate_request(
        body.candidate,
        body.absences,
        year=body.year,
        vacation_available=body.vacation_available,
    )
    return ValidationOut(valid=True, deduction=deduction)


# ── POST /transition ────────────────────────────────────────────────

@router.post("/transition", response_model=AbsenceRecord)
async def transition(body: TransitionRequest):
    """Approve, reject, or revert an absence to pending."""
    return AbsenceService.change_status(
        body.absence, body.status, body.actor_id, at=body.at,
    )


# ── POST /deduction ─────────────────────────────────────────────────

@router.post("/deduction", response_model=Optional[Deduction])
async def get_deduction(body: DeductionRequest):
    """Balance debit to record with an approval; null when nothing is deducted."""
    return AbsenceService.get_deduction(body.absence)
