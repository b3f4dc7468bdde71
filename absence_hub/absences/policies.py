"""Absence policy catalog — which balance each absence type consumes, and how much.

The catalog is static and read-only. Lookups go through ``POLICY_INDEX``,
keyed by ``(type, subtype)`` where the subtype is only part of the key for
licenses. Duplicate keys are rejected when the module is imported.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Iterable, Optional

from absence_hub.absences.dates import count_chargeable_days, days_between_inclusive
from absence_hub.absences.schemas import AbsenceRecord, Deduction, PolicyDefinition
from absence_hub.common.constants import (
    AbsenceType,
    BalanceKey,
    CountingStrategy,
    CountMode,
    LicenseSubtype,
    PolicyUnit,
)
from absence_hub.common.exceptions import ValidationException

logger = logging.getLogger(__name__)

PolicyKey = tuple[AbsenceType, Optional[LicenseSubtype]]


def _license(
    key: str,
    label: str,
    subtype: LicenseSubtype,
    allowance: int,
    deducts_from: BalanceKey,
    unit: PolicyUnit = PolicyUnit.day,
) -> PolicyDefinition:
    return PolicyDefinition(
        key=key,
        label=label,
        type=AbsenceType.license,
        subtype=subtype,
        unit=unit,
        allowance=Decimal(allowance),
        deducts=True,
        deducts_from=deducts_from,
    )


POLICIES: tuple[PolicyDefinition, ...] = (
    # ── Day-based absences ──────────────────────────────────────────
    PolicyDefinition(
        key="VACATION",
        label="Vacation",
        type=AbsenceType.vacation,
        allowance=None,     # seniority-based, see absence_hub.vacations
        deducts=True,
        deducts_from=BalanceKey.vacation_days,
        counting=CountingStrategy.vacation_business_days,
    ),
    PolicyDefinition(
        key="HOME_OFFICE",
        label="Home office",
        type=AbsenceType.home_office,
        allowance=Decimal(15),
        deducts=True,
        deducts_from=BalanceKey.home_office_days,
    ),
    PolicyDefinition(
        key="BIRTHDAY",
        label="Birthday",
        type=AbsenceType.birthday,
        allowance=Decimal(1),
        deducts=True,
        deducts_from=BalanceKey.birthday_day,
    ),
    PolicyDefinition(
        key="SICK",
        label="Sick leave",
        type=AbsenceType.sick,
        allowance=None,
        deducts=False,
    ),
    # ── Licenses ────────────────────────────────────────────────────
    _license("LIC_FAMILY_CARE", "Family care", LicenseSubtype.family_care, 20,
             BalanceKey.lic_family_care_days),
    _license("LIC_BIRTHDAY_FREE", "Birthday day off", LicenseSubtype.birthday_free, 1,
             BalanceKey.birthday_day),
    _license("LIC_EXAMS", "Exams", LicenseSubtype.exam, 10,
             BalanceKey.lic_exams_days),
    _license("LIC_BEREAVEMENT_CLOSE", "Bereavement (spouse, child, parent)",
             LicenseSubtype.bereavement_close, 3, BalanceKey.lic_bereavement_close_days),
    _license("LIC_BEREAVEMENT_SIBLING", "Bereavement (sibling)",
             LicenseSubtype.bereavement_sibling, 1, BalanceKey.lic_bereavement_sibling_days),
    _license("LIC_PATERNITY", "Paternity", LicenseSubtype.paternity, 2,
             BalanceKey.lic_paternity_days),
    _license("LIC_MATERNITY", "Maternity", LicenseSubtype.maternity, 90,
             BalanceKey.lic_maternity_days),
    _license("LIC_MOVING", "Moving", LicenseSubtype.moving, 1,
             BalanceKey.lic_moving_days),
    _license("LIC_PERSONAL_REASONS", "Personal reasons", LicenseSubtype.personal_reasons, 6,
             BalanceKey.lic_personal_reasons_days),
    # ── Hour-based licenses ─────────────────────────────────────────
    _license("LIC_PERSONAL_ERRAND", "Personal errand", LicenseSubtype.personal_errand, 12,
             BalanceKey.lic_personal_errand_hours, unit=PolicyUnit.hour),
    _license("LIC_MEDICAL_APPOINTMENT", "Medical appointment",
             LicenseSubtype.medical_appointment, 6,
             BalanceKey.lic_medical_appointment_hours, unit=PolicyUnit.hour),
)


def policy_key(
    absence_type: AbsenceType,
    subtype: Optional[LicenseSubtype] = None,
) -> PolicyKey:
    """Composite lookup key; subtypes only discriminate licenses."""
    return (absence_type, subtype if absence_type == AbsenceType.license else None)


def build_policy_index(policies: Iterable[PolicyDefinition]) -> dict[PolicyKey, PolicyDefinition]:
    """Index policies by ``(type, subtype)``, refusing duplicate keys."""
    index: dict[PolicyKey, PolicyDefinition] = {}
    for policy in policies:
        key = policy_key(policy.type, policy.subtype)
        if key in index:
            raise ValueError(
                f"Duplicate absence policy for {key!r}: "
                f"{index[key].key} and {policy.key}"
            )
        index[key] = policy
    return index


POLICY_INDEX: dict[PolicyKey, PolicyDefinition] = build_policy_index(POLICIES)


def get_policy(
    absence_type: AbsenceType,
    subtype: Optional[LicenseSubtype] = None,
) -> Optional[PolicyDefinition]:
    """Resolve the policy for an absence type, or None if nothing matches."""
    return POLICY_INDEX.get(policy_key(absence_type, subtype))


def policy_for_absence(record) -> Optional[PolicyDefinition]:
    return get_policy(record.type, record.subtype)


def policy_for_balance_key(balance_key: BalanceKey) -> Optional[PolicyDefinition]:
    """First deducting policy that debits ``balance_key``."""
    for policy in POLICIES:
        if policy.deducts and policy.deducts_from == balance_key:
            return policy
    return None


def tracked_balance_keys() -> list[BalanceKey]:
    """Balance keys debited by at least one policy, in catalog order."""
    keys: list[BalanceKey] = []
    for policy in POLICIES:
        if policy.deducts_from is not None and policy.deducts_from not in keys:
            keys.append(policy.deducts_from)
    return keys


# ── Amounts ─────────────────────────────────────────────────────────


def valid_hours(hours: Optional[float]) -> Optional[Decimal]:
    """Hours as a Decimal when positive and finite, otherwise None."""
    if hours is None:
        return None
    try:
        value = float(hours)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return Decimal(str(value))


def amount_for_absence(
    record,
    policy: PolicyDefinition,
    count_mode: CountMode = CountMode.business_days,
) -> Decimal:
    """Units of ``policy`` consumed by ``record``.

    Hour policies use the record's hours (0 when missing or invalid). Day
    policies count the range per the policy's counting strategy.
    """
    if policy.unit == PolicyUnit.hour:
        hours = valid_hours(record.hours)
        if hours is None:
            logger.debug("Absence %s has no usable hours; counting 0", getattr(record, "id", None))
            return Decimal("0")
        return hours

    if policy.counting == CountingStrategy.vacation_business_days:
        return Decimal(count_chargeable_days(record.from_date, record.to_date, count_mode))
    return Decimal(days_between_inclusive(record.from_date, record.to_date))


def build_deduction(
    record: AbsenceRecord,
    count_mode: CountMode = CountMode.business_days,
) -> Optional[Deduction]:
    """Deduction recorded against a balance when ``record`` is approved.

    Returns None when the absence has no policy or its policy does not
    deduct. Raises ValidationException for an inverted range or, on hour
    policies, missing/non-positive hours.
    """
    policy = policy_for_absence(record)
    if policy is None or not policy.deducts or policy.deducts_from is None:
        return None

    if record.to_date < record.from_date:
        raise ValidationException(
            {"to": ["'to' cannot be earlier than 'from'."]}
        )
    if policy.unit == PolicyUnit.hour and valid_hours(record.hours) is None:
        raise ValidationException(
            {"hours": [f"{policy.label} requires hours greater than 0."]}
        )

    return Deduction(
        balance_key=policy.deducts_from,
        unit=policy.unit,
        amount=amount_for_absence(record, policy, count_mode),
    )
