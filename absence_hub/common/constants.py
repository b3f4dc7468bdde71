"""Enums and constants for Absence Hub — matching the values stored by the data service."""

from __future__ import annotations

import enum


# ── Absences ────────────────────────────────────────────────────────

class AbsenceType(str, enum.Enum):
    vacation = "vacation"
    home_office = "home_office"
    birthday = "birthday"
    sick = "sick"
    license = "license"


class LicenseSubtype(str, enum.Enum):
    family_care = "family_care"
    birthday_free = "birthday_free"
    exam = "exam"
    bereavement_close = "bereavement_close"
    bereavement_sibling = "bereavement_sibling"
    paternity = "paternity"
    maternity = "maternity"
    moving = "moving"
    personal_reasons = "personal_reasons"
    personal_errand = "personal_errand"
    medical_appointment = "medical_appointment"


class AbsenceStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Statuses that occupy dates on a user's calendar and count against balances
ACTIVE_STATUSES: frozenset[AbsenceStatus] = frozenset(
    {AbsenceStatus.pending, AbsenceStatus.approved}
)

# Allowed status transitions: decisions on pending, administrative revert
STATUS_TRANSITIONS: dict[AbsenceStatus, frozenset[AbsenceStatus]] = {
    AbsenceStatus.pending: frozenset({AbsenceStatus.approved, AbsenceStatus.rejected}),
    AbsenceStatus.approved: frozenset({AbsenceStatus.pending}),
    AbsenceStatus.rejected: frozenset({AbsenceStatus.pending}),
}


# ── Balances / Policies ─────────────────────────────────────────────

class PolicyUnit(str, enum.Enum):
    day = "day"
    hour = "hour"


class BalanceKey(str, enum.Enum):
    vacation_days = "vacation_days"
    home_office_days = "home_office_days"
    birthday_day = "birthday_day"
    lic_family_care_days = "lic_family_care_days"
    lic_exams_days = "lic_exams_days"
    lic_bereavement_close_days = "lic_bereavement_close_days"
    lic_bereavement_sibling_days = "lic_bereavement_sibling_days"
    lic_paternity_days = "lic_paternity_days"
    lic_maternity_days = "lic_maternity_days"
    lic_moving_days = "lic_moving_days"
    lic_personal_reasons_days = "lic_personal_reasons_days"
    lic_personal_errand_hours = "lic_personal_errand_hours"
    lic_medical_appointment_hours = "lic_medical_appointment_hours"


class CountMode(str, enum.Enum):
    business_days = "business_days"
    calendar_days = "calendar_days"


class CountingStrategy(str, enum.Enum):
    """How a day-denominated policy turns a date range into an amount."""

    vacation_business_days = "vacation_business_days"
    calendar_inclusive = "calendar_inclusive"


# ── Misc constants ──────────────────────────────────────────────────

DEFAULT_CARRYOVER_MAX_CYCLES = 50
WEEKEND_DAYS = frozenset({5, 6})   # date.weekday(): Saturday, Sunday
