"""Submission validation and status transitions for absence requests.

Validation gathers every problem with a candidate before raising, so the
caller can show them all at once. Quota checks are skipped when the policy
cannot be resolved.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from absence_hub.absences.overlap import find_overlapping_absence
from absence_hub.absences.policies import amount_for_absence, get_policy, valid_hours
from absence_hub.absences.schemas import AbsenceCandidate, AbsenceRecord, Deduction
from absence_hub.absences.stats import available_for, compute_usage_by_balance_key
from absence_hub.common.constants import (
    STATUS_TRANSITIONS,
    AbsenceStatus,
    AbsenceType,
    CountMode,
    PolicyUnit,
)
from absence_hub.common.exceptions import (
    ConflictError,
    InvalidTransitionException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def validate_absence_request(
    candidate: AbsenceCandidate,
    existing: Sequence[AbsenceRecord],
    *,
    year: Optional[int] = None,
    vacation_available: Optional[Decimal] = None,
    count_mode: CountMode = CountMode.business_days,
) -> Optional[Deduction]:
    """Check a candidate absence and return the deduction it would consume.

    Raises:
        ValidationException: bad fields or a request over its quota.
        ConflictError: the range overlaps a pending or approved absence.
    """
    errors: dict[str, list[str]] = {}

    # ── Policy resolution ───────────────────────────────────────────
    policy = None
    if candidate.type == AbsenceType.license and candidate.subtype is None:
        errors.setdefault("subtype", []).append("A license requires a subtype.")
    else:
        policy = get_policy(candidate.type, candidate.subtype)
        if policy is None:
            errors.setdefault("type", []).append(
                "No absence policy matches this type/subtype."
            )

    # ── Dates / hours ───────────────────────────────────────────────
    if policy is not None and policy.unit == PolicyUnit.hour:
        if candidate.to_date != candidate.from_date:
            errors.setdefault("to", []).append(
                "Hour-based licenses must start and end on the same day."
            )
        if valid_hours(candidate.hours) is None:
            errors.setdefault("hours", []).append(
                f"{policy.label} requires hours greater than 0."
            )
    elif candidate.to_date < candidate.from_date:
        errors.setdefault("to", []).append("'to' cannot be earlier than 'from'.")

    if errors:
        logger.info("Absence request rejected: %s", errors)
        raise ValidationException(errors)

    # ── Overlap (advisory; the data service enforces it too) ────────
    conflict = find_overlapping_absence(
        existing, candidate.from_date, candidate.to_date, ignore_id=candidate.id,
    )
    if conflict is not None:
        logger.info("Absence request overlaps %s", conflict.id)
        raise ConflictError(conflict.id, conflict.from_date, conflict.to_date)

    if policy is None or not policy.deducts or policy.deducts_from is None:
        return None

    requested = amount_for_absence(candidate, policy, count_mode)

    # ── Quota ───────────────────────────────────────────────────────
    if candidate.type == AbsenceType.vacation:
        if vacation_available is not None and requested > vacation_available:
            errors["dates"] = [
                f"Requested {requested} vacation day(s) but only "
                f"{vacation_available} available."
            ]
    elif policy.allowance is not None:
        quota_year = year if year is not None else candidate.from_date.year
        others = [a for a in existing if candidate.id is None or a.id != candidate.id]
        usage = compute_usage_by_balance_key(others, quota_year, count_mode)
        used = usage[policy.deducts_from].used if policy.deducts_from in usage else Decimal("0")
        remaining = available_for(policy.allowance, used)
        if requested > remaining:
            field = "hours" if policy.unit == PolicyUnit.hour else "dates"
            errors[field] = [
                f"{policy.label} allows {policy.allowance} {policy.unit.value}(s) per year; "
                f"{remaining} left, {requested} requested."
            ]

    if errors:
        logger.info("Absence request over quota: %s", errors)
        raise ValidationException(errors)

    return Deduction(
        balance_key=policy.deducts_from,
        unit=policy.unit,
        amount=requested,
    )


def transition_status(
    record: AbsenceRecord,
    new_status: AbsenceStatus,
    *,
    actor_id: str,
    at: datetime,
) -> AbsenceRecord:
    """Return a copy of ``record`` moved to ``new_status``.

    Approving or rejecting stamps the deciding actor and time; reverting to
    pending clears them. The caller supplies ``at``.
    """
    allowed = STATUS_TRANSITIONS.get(record.status, frozenset())
    if new_status not in allowed:
        raise InvalidTransitionException(record.status.value, new_status.value)

    if new_status == AbsenceStatus.pending:
        decided_by, decided_at = None, None
    else:
        decided_by, decided_at = actor_id, at

    logger.info(
        "Absence %s: %s → %s by %s", record.id, record.status.value, new_status.value, actor_id,
    )
    return record.model_copy(
        update={"status": new_status, "decided_by": decided_by, "decided_at": decided_at},
    )
