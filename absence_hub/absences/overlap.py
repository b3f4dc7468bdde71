"""Overlap detection between a candidate date range and existing absences.

This check is advisory: two concurrent submissions can both pass it. The
persistence layer's exclusion constraint remains the authoritative guard.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence, TypeVar

from absence_hub.absences.dates import DateLike, as_date
from absence_hub.common.constants import ACTIVE_STATUSES, AbsenceStatus

RecordT = TypeVar("RecordT")


def ranges_overlap(a_from: date, a_to: date, b_from: date, b_to: date) -> bool:
    """Closed-interval overlap: shared endpoints count as overlapping."""
    return a_from <= b_to and b_from <= a_to


def find_overlapping_absence(
    existing: Iterable[RecordT],
    candidate_from: DateLike,
    candidate_to: DateLike,
    *,
    ignore_id: Optional[str] = None,
    statuses: Optional[Sequence[AbsenceStatus]] = None,
) -> Optional[RecordT]:
    """Return the first record in ``existing`` whose range overlaps the candidate.

    Records with id ``ignore_id`` (the record being edited) and records whose
    status is outside ``statuses`` (default: pending and approved) are
    skipped.
    """
    start = as_date(candidate_from)
    end = as_date(candidate_to)
    allowed = frozenset(statuses) if statuses is not None else ACTIVE_STATUSES

    for record in existing:
        if ignore_id is not None and record.id == ignore_id:
            continue
        if record.status not in allowed:
            continue
        if ranges_overlap(start, end, record.from_date, record.to_date):
            return record
    return None
