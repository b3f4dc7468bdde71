"""Overlap detection tests."""

from __future__ import annotations

from datetime import date

import pytest

from absence_hub.absences.overlap import find_overlapping_absence, ranges_overlap
from absence_hub.common.constants import AbsenceStatus
from tests.conftest import _make_absence


@pytest.fixture
def existing():
    return [_make_absence(date(2024, 3, 10), date(2024, 3, 15), id="x")]


class TestRangesOverlap:

    def test_shared_endpoint_overlaps(self):
        assert ranges_overlap(date(2024, 3, 1), date(2024, 3, 10), date(2024, 3, 10), date(2024, 3, 12))

    def test_adjacent_does_not_overlap(self):
        assert not ranges_overlap(date(2024, 3, 1), date(2024, 3, 9), date(2024, 3, 10), date(2024, 3, 12))


class TestFindOverlappingAbsence:

    @pytest.mark.parametrize(
        "start, end",
        [
            (date(2024, 3, 12), date(2024, 3, 12)),   # inside
            (date(2024, 3, 1), date(2024, 3, 31)),    # contains
            (date(2024, 3, 14), date(2024, 3, 20)),   # partial, right
            (date(2024, 3, 5), date(2024, 3, 10)),    # partial, left edge
        ],
    )
    def test_detects_overlap(self, existing, start, end):
        assert find_overlapping_absence(existing, start, end).id == "x"

    def test_adjacent_range_is_free(self, existing):
        assert find_overlapping_absence(existing, date(2024, 3, 16), date(2024, 3, 20)) is None

    def test_rejected_record_ignored(self):
        rejected = [
            _make_absence(date(2024, 3, 10), date(2024, 3, 15), status=AbsenceStatus.rejected),
        ]
        assert find_overlapping_absence(rejected, date(2024, 3, 10), date(2024, 3, 15)) is None

    def test_pending_record_conflicts(self):
        pending = [
            _make_absence(date(2024, 3, 10), date(2024, 3, 15), status=AbsenceStatus.pending, id="p"),
        ]
        assert find_overlapping_absence(pending, date(2024, 3, 11), date(2024, 3, 11)).id == "p"

    def test_ignore_self_on_edit(self, existing):
        assert find_overlapping_absence(
            existing, date(2024, 3, 12), date(2024, 3, 18), ignore_id="x",
        ) is None

    def test_ignore_self_still_finds_others(self, existing):
        existing.append(
            _make_absence(date(2024, 3, 18), date(2024, 3, 19), status=AbsenceStatus.pending, id="y"),
        )
        conflict = find_overlapping_absence(
            existing, date(2024, 3, 12), date(2024, 3, 18), ignore_id="x",
        )
        assert conflict.id == "y"

    def test_custom_statuses(self):
        records = [
            _make_absence(date(2024, 3, 10), date(2024, 3, 15), status=AbsenceStatus.pending),
        ]
        assert find_overlapping_absence(
            records, date(2024, 3, 10), date(2024, 3, 10), statuses=[AbsenceStatus.approved],
        ) is None

    def test_returns_first_match(self):
        records = [
            _make_absence(date(2024, 3, 10), date(2024, 3, 11), id="first"),
            _make_absence(date(2024, 3, 11), date(2024, 3, 12), id="second"),
        ]
        assert find_overlapping_absence(records, "2024-03-11", "2024-03-11").id == "first"
