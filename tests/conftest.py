"""Shared test fixtures — app, client, absence factories.

Reusable across all test modules (dates, policies, stats, vacations, API).
Everything is in-memory; no data service is involved.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from absence_hub.absences.schemas import AbsenceCandidate, AbsenceRecord
from absence_hub.common.constants import AbsenceStatus, AbsenceType, LicenseSubtype
from absence_hub.main import create_app


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from absence_hub.common.rate_limit import limiter

    limiter.reset()
    yield


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance."""
    yield create_app()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Model factories ─────────────────────────────────────────────────

def _make_absence(
    from_date: date,
    to_date: Optional[date] = None,
    *,
    type: AbsenceType = AbsenceType.vacation,
    subtype: Optional[LicenseSubtype] = None,
    status: AbsenceStatus = AbsenceStatus.approved,
    hours: Optional[float] = None,
    id: Optional[str] = None,
    user_id: str = "user-1",
    note: Optional[str] = None,
) -> AbsenceRecord:
    return AbsenceRecord(
        id=id or uuid.uuid4().hex[:12],
        user_id=user_id,
        from_date=from_date,
        to_date=to_date or from_date,
        type=type,
        subtype=subtype,
        hours=hours,
        status=status,
        note=note,
    )


def _make_candidate(
    from_date: date,
    to_date: Optional[date] = None,
    *,
    type: AbsenceType = AbsenceType.vacation,
    subtype: Optional[LicenseSubtype] = None,
    hours: Optional[float] = None,
    id: Optional[str] = None,
) -> AbsenceCandidate:
    return AbsenceCandidate(
        id=id,
        from_date=from_date,
        to_date=to_date or from_date,
        type=type,
        subtype=subtype,
        hours=hours,
    )


def _absence_json(record: AbsenceRecord) -> dict:
    """Wire shape of a record, using the ``from`` / ``to`` aliases."""
    return record.model_dump(mode="json", by_alias=True)
