"""Absence Pydantic v2 schemas — records, policies, balances, request/response bodies.

Naming conventions:
  - *Request            → request bodies (write)
  - *Out                → response bodies (read)
  - plain nouns         → value objects shared by the calculation modules
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from absence_hub.common.constants import (
    AbsenceStatus,
    AbsenceType,
    BalanceKey,
    CountingStrategy,
    LicenseSubtype,
    PolicyUnit,
)


# ═════════════════════════════════════════════════════════════════════
# Absence records
# ═════════════════════════════════════════════════════════════════════


class AbsenceRecord(BaseModel):
    """A single leave request as supplied by the absence data source.

    ``from`` / ``to`` are inclusive calendar dates. Hour-denominated
    licenses carry ``hours`` and a single date.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: str
    user_name: Optional[str] = None
    from_date: date = Field(..., alias="from")
    to_date: date = Field(..., alias="to")
    type: AbsenceType
    subtype: Optional[LicenseSubtype] = None
    hours: Optional[float] = None
    status: AbsenceStatus = AbsenceStatus.pending
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None


class AbsenceCandidate(BaseModel):
    """A request being created or edited, before persistence.

    ``id`` is set when editing so the record does not conflict with itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    from_date: date = Field(..., alias="from")
    to_date: date = Field(..., alias="to")
    type: AbsenceType
    subtype: Optional[LicenseSubtype] = None
    hours: Optional[float] = None
    note: Optional[str] = Field(None, max_length=1000)


# ═════════════════════════════════════════════════════════════════════
# Policies
# ═════════════════════════════════════════════════════════════════════


class PolicyDefinition(BaseModel):
    """Catalog entry describing how an absence type consumes a balance."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: AbsenceType
    subtype: Optional[LicenseSubtype] = None
    unit: PolicyUnit = PolicyUnit.day
    allowance: Optional[Decimal] = None
    deducts: bool = False
    deducts_from: Optional[BalanceKey] = None
    counting: CountingStrategy = CountingStrategy.calendar_inclusive

    @model_validator(mode="after")
    def validate_deduction_target(self) -> "PolicyDefinition":
        if self.deducts != (self.deducts_from is not None):
            raise ValueError("deducts_from must be set exactly when deducts is true.")
        return self


class Deduction(BaseModel):
    """Amount an absence debits from a named balance."""

    balance_key: BalanceKey
    unit: PolicyUnit
    amount: Decimal


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


class BalanceStats(BaseModel):
    """Derived quota state for one balance key over a time window."""

    balance_key: BalanceKey
    unit: PolicyUnit
    allowance: Optional[Decimal] = None
    used: Decimal = Decimal("0")
    reserved: Decimal = Decimal("0")
    available: Optional[Decimal] = None


class Usage(BaseModel):
    """Approved-only consumption for one balance key."""

    used: Decimal = Decimal("0")
    unit: PolicyUnit


class HistoryRow(BaseModel):
    """One deducting absence, flattened for detail tables and exports."""

    id: str
    date_from: date
    date_to: date
    type: str
    status: AbsenceStatus
    balance_key: BalanceKey
    unit: PolicyUnit
    amount: Decimal
    note: Optional[str] = None


class BalanceSummaryRow(BaseModel):
    """A tracked balance with its label, ready for a dashboard listing."""

    balance_key: BalanceKey
    label: str
    unit: PolicyUnit
    allowance: Optional[Decimal] = None
    used: Decimal = Decimal("0")
    reserved: Decimal = Decimal("0")
    available: Optional[Decimal] = None


# ═════════════════════════════════════════════════════════════════════
# Request bodies
# ═════════════════════════════════════════════════════════════════════


class BalanceStatsRequest(BaseModel):
    """Compute per-key stats for a year, or one month of it."""

    absences: list[AbsenceRecord] = Field(default_factory=list)
    year: int = Field(..., ge=1900, le=9999)
    month: Optional[int] = Field(None, ge=1, le=12, description="1-based month; omit for the whole year")
    hire_date: Optional[date] = Field(
        None, description="When given, the vacation row uses the seniority-based balance",
    )


class UsageRequest(BaseModel):
    absences: list[AbsenceRecord] = Field(default_factory=list)
    year: int = Field(..., ge=1900, le=9999)


class HistoryRequest(BaseModel):
    absences: list[AbsenceRecord] = Field(default_factory=list)
    year: int = Field(..., ge=1900, le=9999)
    month: Optional[int] = Field(None, ge=1, le=12)


class OverlapRequest(BaseModel):
    """Look for an existing absence colliding with a candidate range."""

    model_config = ConfigDict(populate_by_name=True)

    absences: list[AbsenceRecord] = Field(default_factory=list)
    from_date: date = Field(..., alias="from")
    to_date: date = Field(..., alias="to")
    ignore_id: Optional[str] = None
    statuses: Optional[list[AbsenceStatus]] = None


class ValidateRequest(BaseModel):
    """Pre-submission check of a candidate against the user's absences."""

    candidate: AbsenceCandidate
    absences: list[AbsenceRecord] = Field(default_factory=list)
    year: Optional[int] = Field(None, description="Quota year; defaults to the candidate's start year")
    vacation_available: Optional[Decimal] = Field(
        None, description="Available vacation days; vacation requests are only capped when given",
    )


class TransitionRequest(BaseModel):
    absence: AbsenceRecord
    status: AbsenceStatus
    actor_id: str
    at: Optional[datetime] = None


class DeductionRequest(BaseModel):
    absence: AbsenceRecord


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class BalanceStatsOut(BaseModel):
    year: int
    month: Optional[int] = None
    balances: list[BalanceStats]
    summary: list[BalanceSummaryRow]


class UsageOut(BaseModel):
    year: int
    usage: dict[BalanceKey, Usage]


class OverlapOut(BaseModel):
    conflict: Optional[AbsenceRecord] = None


class ValidationOut(BaseModel):
    valid: bool = True
    deduction: Optional[Deduction] = None
