"""Vacation Pydantic v2 schemas — entitlement rules, balances, bucket ledger.

Two balance models coexist:
  - ClientComputed → single-year balance derived from absences + hire date
  - ServerLedger   → FIFO bucket ledger computed by the vacation ledger service
Both resolve to ``VacationInfo`` for display.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from absence_hub.absences.schemas import AbsenceRecord
from absence_hub.common.constants import CountMode


# ═════════════════════════════════════════════════════════════════════
# Rules / settings
# ═════════════════════════════════════════════════════════════════════


class EntitlementRule(BaseModel):
    """Seniority threshold: from ``min_years`` of service, ``days`` per year."""

    model_config = ConfigDict(frozen=True)

    min_years: int = Field(..., ge=0)
    days: int = Field(..., ge=0)


class VacationSettings(BaseModel):
    count_mode: CountMode = CountMode.business_days
    carryover_enabled: bool = True
    carryover_max_cycles: Optional[int] = Field(
        None, ge=0, description="Prior years folded into carryover; unset means 50",
    )


# ═════════════════════════════════════════════════════════════════════
# Balances
# ═════════════════════════════════════════════════════════════════════


class VacationInfo(BaseModel):
    """Display shape shared by both balance models."""

    entitlement: Decimal = Decimal("0")
    carryover: Decimal = Decimal("0")
    used_this_year: Decimal = Decimal("0")
    reserved_this_year: Decimal = Decimal("0")
    available: Decimal = Decimal("0")


class VacationBalance(BaseModel):
    """Single-year balance computed from absences and the hire date."""

    entitlement: int
    carryover: int = 0
    used_this_year: int = 0
    reserved_this_year: int = 0
    available: int = 0

    def to_info(self) -> VacationInfo:
        return VacationInfo(
            entitlement=Decimal(self.entitlement),
            carryover=Decimal(self.carryover),
            used_this_year=Decimal(self.used_this_year),
            reserved_this_year=Decimal(self.reserved_this_year),
            available=Decimal(self.available),
        )


class VacationBucket(BaseModel):
    """One annual grant: consumed FIFO, expires ``expires_at`` (exclusive)."""

    model_config = ConfigDict(from_attributes=True)

    grant_date: date
    expires_at: date
    granted: Decimal = Decimal("0")
    used: Decimal = Decimal("0")
    remaining: Decimal = Decimal("0")

    @field_validator("granted", "used", "remaining", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return Decimal("0") if v is None else v

    def is_alive(self, reference_date: date) -> bool:
        return self.grant_date <= reference_date < self.expires_at


class VacationLedger(BaseModel):
    """Bucket ledger plus window totals, as served by the ledger service."""

    model_config = ConfigDict(from_attributes=True)

    available: Decimal = Decimal("0")
    granted: Decimal = Decimal("0")
    used: Decimal = Decimal("0")
    next_expiration: Optional[date] = None
    buckets: list[VacationBucket] = Field(default_factory=list)

    @field_validator("available", "granted", "used", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return Decimal("0") if v is None else v

    @field_validator("buckets", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v


# ═════════════════════════════════════════════════════════════════════
# Balance sources (tagged union)
# ═════════════════════════════════════════════════════════════════════


class ClientComputed(BaseModel):
    kind: Literal["client"] = "client"
    absences: list[AbsenceRecord] = Field(default_factory=list)
    current_year: int = Field(..., ge=1900, le=9999)
    hire_date: Optional[date] = None
    settings: Optional[VacationSettings] = None


class ServerLedger(BaseModel):
    kind: Literal["ledger"] = "ledger"
    ledger: Optional[VacationLedger] = None


VacationBalanceSource = Annotated[
    Union[ClientComputed, ServerLedger],
    Field(discriminator="kind"),
]


# ═════════════════════════════════════════════════════════════════════
# Request / response bodies
# ═════════════════════════════════════════════════════════════════════


class VacationBalanceRequest(BaseModel):
    absences: list[AbsenceRecord] = Field(default_factory=list)
    year: int = Field(..., ge=1900, le=9999)
    hire_date: Optional[date] = None
    settings: Optional[VacationSettings] = None


class VacationLedgerRequest(BaseModel):
    absences: list[AbsenceRecord] = Field(default_factory=list)
    hire_date: Optional[date] = None
    reference_date: date
    accrual_years: Optional[int] = Field(None, ge=1, le=50)


class VacationInfoRequest(BaseModel):
    source: VacationBalanceSource
    reference_date: date


class EntitlementOut(BaseModel):
    year: int
    hire_date: Optional[date] = None
    years_of_service: int
    entitlement_days: int
