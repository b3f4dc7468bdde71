"""Request validation and status transition tests."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from absence_hub.absences.service import AbsenceService
from absence_hub.absences.validation import transition_status, validate_absence_request
from absence_hub.common.constants import (
    AbsenceStatus,
    AbsenceType,
    BalanceKey,
    LicenseSubtype,
    PolicyUnit,
)
from absence_hub.common.exceptions import (
    ConflictError,
    InvalidTransitionException,
    ValidationException,
)
from tests.conftest import _make_absence, _make_candidate

DECIDED_AT = datetime(2024, 2, 1, 9, 30, tzinfo=timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# Field validation
# ═════════════════════════════════════════════════════════════════════


class TestFieldValidation:

    def test_license_requires_subtype(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(_make_candidate(date(2024, 3, 4), type=AbsenceType.license), [])
        assert "subtype" in exc_info.value.errors

    def test_inverted_range(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(_make_candidate(date(2024, 3, 8), date(2024, 3, 4)), [])
        assert "to" in exc_info.value.errors

    def test_hour_license_collects_all_errors(self):
        candidate = _make_candidate(
            date(2024, 3, 4), date(2024, 3, 5),
            type=AbsenceType.license, subtype=LicenseSubtype.personal_errand,
        )
        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(candidate, [])

        assert set(exc_info.value.errors) == {"to", "hours"}
        assert exc_info.value.status_code == 422

    def test_hour_license_rejects_non_positive_hours(self):
        candidate = _make_candidate(
            date(2024, 3, 4),
            type=AbsenceType.license, subtype=LicenseSubtype.medical_appointment, hours=0,
        )
        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(candidate, [])
        assert "hours" in exc_info.value.errors


# ═════════════════════════════════════════════════════════════════════
# Overlap
# ═════════════════════════════════════════════════════════════════════


class TestOverlapValidation:

    def test_conflict_with_approved(self):
        existing = [_make_absence(date(2024, 3, 10), date(2024, 3, 15), id="x")]
        with pytest.raises(ConflictError) as exc_info:
            validate_absence_request(_make_candidate(date(2024, 3, 14), date(2024, 3, 20)), existing)

        assert exc_info.value.absence_id == "x"
        assert exc_info.value.status_code == 409

    def test_editing_does_not_conflict_with_itself(self):
        existing = [_make_absence(date(2024, 3, 11), date(2024, 3, 15), id="x")]
        candidate = _make_candidate(date(2024, 3, 12), date(2024, 3, 18), id="x")

        deduction = validate_absence_request(candidate, existing)
        assert deduction.amount == Decimal(5)

    def test_field_errors_take_precedence(self):
        existing = [_make_absence(date(2024, 3, 1), date(2024, 3, 31))]
        with pytest.raises(ValidationException):
            validate_absence_request(_make_candidate(date(2024, 3, 8), date(2024, 3, 4)), existing)


# ═════════════════════════════════════════════════════════════════════
# Quota
# ═════════════════════════════════════════════════════════════════════


class TestQuotaValidation:

    def test_non_deducting_policy_returns_none(self):
        assert validate_absence_request(
            _make_candidate(date(2024, 3, 4), date(2024, 3, 8), type=AbsenceType.sick), [],
        ) is None

    def test_vacation_unchecked_without_available(self):
        deduction = validate_absence_request(_make_candidate(date(2024, 3, 4), date(2024, 3, 8)), [])

        assert deduction.balance_key == BalanceKey.vacation_days
        assert deduction.amount == Decimal(5)

    def test_vacation_over_available(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(
                _make_candidate(date(2024, 3, 4), date(2024, 3, 8)), [],
                vacation_available=Decimal(4),
            )
        assert "dates" in exc_info.value.errors

    def test_vacation_within_available(self):
        deduction = validate_absence_request(
            _make_candidate(date(2024, 3, 4), date(2024, 3, 8)), [],
            vacation_available=Decimal(5),
        )
        assert deduction.amount == Decimal(5)

    def test_home_office_over_quota(self):
        existing = [
            _make_absence(date(2024, 3, 4), date(2024, 3, 13), type=AbsenceType.home_office),
        ]
        candidate = _make_candidate(date(2024, 4, 1), date(2024, 4, 6), type=AbsenceType.home_office)

        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(candidate, existing)
        assert "dates" in exc_info.value.errors

    def test_home_office_exactly_at_quota(self):
        existing = [
            _make_absence(date(2024, 3, 4), date(2024, 3, 13), type=AbsenceType.home_office),
        ]
        candidate = _make_candidate(date(2024, 4, 1), date(2024, 4, 5), type=AbsenceType.home_office)

        assert validate_absence_request(candidate, existing).amount == Decimal(5)

    def test_pending_records_do_not_consume_quota(self):
        existing = [
            _make_absence(
                date(2024, 3, 4), date(2024, 3, 13),
                type=AbsenceType.home_office, status=AbsenceStatus.pending,
            ),
        ]
        candidate = _make_candidate(date(2024, 4, 1), date(2024, 4, 15), type=AbsenceType.home_office)

        assert validate_absence_request(candidate, existing).amount == Decimal(15)

    def test_edited_record_does_not_count_against_itself(self):
        existing = [
            _make_absence(date(2024, 3, 4), date(2024, 3, 13), type=AbsenceType.home_office, id="ho"),
        ]
        candidate = _make_candidate(
            date(2024, 3, 4), date(2024, 3, 18), type=AbsenceType.home_office, id="ho",
        )

        assert validate_absence_request(candidate, existing).amount == Decimal(15)

    def test_hour_quota(self):
        existing = [
            _make_absence(
                date(2024, 3, 4), type=AbsenceType.license,
                subtype=LicenseSubtype.personal_errand, hours=10,
            ),
        ]
        candidate = _make_candidate(
            date(2024, 3, 5), type=AbsenceType.license,
            subtype=LicenseSubtype.personal_errand, hours=3,
        )

        with pytest.raises(ValidationException) as exc_info:
            validate_absence_request(candidate, existing)
        assert "hours" in exc_info.value.errors

    def test_hour_deduction(self):
        candidate = _make_candidate(
            date(2024, 3, 5), type=AbsenceType.license,
            subtype=LicenseSubtype.personal_errand, hours=2,
        )
        deduction = validate_absence_request(candidate, [])

        assert deduction.unit == PolicyUnit.hour
        assert deduction.amount == Decimal(2)

    def test_quota_year_override(self):
        existing = [
            _make_absence(date(2023, 3, 6), date(2023, 3, 15), type=AbsenceType.home_office),
        ]
        candidate = _make_candidate(date(2024, 4, 1), date(2024, 4, 6), type=AbsenceType.home_office)

        # Default quota year is the candidate's start year: 2023 usage is irrelevant
        assert validate_absence_request(candidate, existing).amount == Decimal(6)
        with pytest.raises(ValidationException):
            validate_absence_request(candidate, existing, year=2023)


# ═════════════════════════════════════════════════════════════════════
# Status transitions
# ═════════════════════════════════════════════════════════════════════


class TestTransitionStatus:

    def test_approve_stamps_decision(self):
        record = _make_absence(date(2024, 3, 4), status=AbsenceStatus.pending)
        at = datetime(2024, 2, 1, 9, 30, tzinfo=timezone.utc)

        approved = transition_status(record, AbsenceStatus.approved, actor_id="mgr-1", at=at)

        assert approved.status == AbsenceStatus.approved
        assert approved.decided_by == "mgr-1"
        assert approved.decided_at == at
        assert record.status == AbsenceStatus.pending

    def test_reject_stamps_given_time(self):
        record = _make_absence(date(2024, 3, 4), status=AbsenceStatus.pending)
        rejected = transition_status(record, AbsenceStatus.rejected, actor_id="mgr-1", at=DECIDED_AT)

        assert rejected.status == AbsenceStatus.rejected
        assert rejected.decided_at == DECIDED_AT

    def test_decision_time_is_required(self):
        record = _make_absence(date(2024, 3, 4), status=AbsenceStatus.pending)
        with pytest.raises(TypeError):
            transition_status(record, AbsenceStatus.approved, actor_id="mgr-1")

    def test_revert_clears_decision(self):
        record = _make_absence(date(2024, 3, 4)).model_copy(
            update={"decided_by": "mgr-1", "decided_at": datetime(2024, 2, 1, tzinfo=timezone.utc)},
        )
        reverted = transition_status(record, AbsenceStatus.pending, actor_id="admin", at=DECIDED_AT)

        assert reverted.status == AbsenceStatus.pending
        assert reverted.decided_by is None
        assert reverted.decided_at is None

    @pytest.mark.parametrize(
        "current, requested",
        [
            (AbsenceStatus.approved, AbsenceStatus.rejected),
            (AbsenceStatus.rejected, AbsenceStatus.approved),
            (AbsenceStatus.pending, AbsenceStatus.pending),
            (AbsenceStatus.approved, AbsenceStatus.approved),
        ],
    )
    def test_invalid_transitions(self, current, requested):
        record = _make_absence(date(2024, 3, 4), status=current)
        with pytest.raises(InvalidTransitionException) as exc_info:
            transition_status(record, requested, actor_id="mgr-1", at=DECIDED_AT)
        assert exc_info.value.status_code == 409


class TestChangeStatus:

    def test_stamps_current_time_when_omitted(self):
        record = _make_absence(date(2024, 3, 4), status=AbsenceStatus.pending)
        before = datetime.now(timezone.utc)

        approved = AbsenceService.change_status(record, AbsenceStatus.approved, "mgr-1")

        assert approved.decided_by == "mgr-1"
        assert before <= approved.decided_at <= datetime.now(timezone.utc)

    def test_passes_given_time_through(self):
        record = _make_absence(date(2024, 3, 4), status=AbsenceStatus.pending)
        approved = AbsenceService.change_status(
            record, AbsenceStatus.approved, "mgr-1", at=DECIDED_AT,
        )

        assert approved.decided_at == DECIDED_AT
