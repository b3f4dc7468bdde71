"""Absence Hub errors and their RFC 7807 ``application/problem+json`` rendering.

Calculations return neutral values for expected conditions (no policy, empty
input). Exceptions are reserved for requests that cannot be honoured: bad
fields, date collisions, illegal status changes.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

BASE_ERROR_URI = "https://absence-hub.local/errors"
PROBLEM_JSON = "application/problem+json"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class ConflictError(AppException):
    """409 — requested range collides with a pending or approved absence."""

    def __init__(self, absence_id: str, from_date: Any, to_date: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Overlapping Absence",
            detail=(
                f"The range overlaps absence '{absence_id}' "
                f"({from_date} to {to_date}) which is pending or approved."
            ),
            errors={"dates": [f"Overlaps absence '{absence_id}'."]},
        )
        self.absence_id = absence_id


class InvalidTransitionException(AppException):
    """409 — status change not allowed from the current status."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            status_code=409,
            error_type="invalid-transition",
            title="Invalid Status Transition",
            detail=f"Cannot move an absence from '{current}' to '{requested}'.",
            errors={"status": [f"'{current}' → '{requested}' is not allowed."]},
        )


class ValidationException(AppException):
    """422 — an absence request failed a field or quota check."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


# ── RFC 7807 rendering ──────────────────────────────────────────────

def _problem_response(
    request: Request,
    status_code: int,
    error_type: str,
    title: str,
    detail: str,
    errors: Optional[dict[str, list[str]]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": str(request.url.path),
    }
    if errors:
        body["errors"] = errors
    logger.info("%s %s → %d %s", request.method, request.url.path, status_code, error_type)
    return JSONResponse(status_code=status_code, content=body, media_type=PROBLEM_JSON)


def _field_name(loc: tuple) -> str:
    # ("body", "candidate", "from") → "candidate.from"
    if len(loc) > 1:
        return ".".join(str(p) for p in loc[1:])
    return str(loc[0]) if loc else "unknown"


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    return _problem_response(
        request, exc.status_code, exc.error_type, exc.title, exc.detail, exc.errors,
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field_errors.setdefault(_field_name(err.get("loc", ())), []).append(
            err.get("msg", "Invalid value"),
        )
    return _problem_response(
        request, 422, "validation-error", "Validation Error",
        "Request validation failed.", field_errors,
    )


async def _handle_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _problem_response(
        request, 429, "rate-limited", "Too Many Requests",
        f"Rate limit exceeded: {exc.detail}",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach the problem+json handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _handle_rate_limited)  # type: ignore[arg-type]
