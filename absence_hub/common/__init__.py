"""Common module — shared enums, exceptions and rate limiting for Absence Hub."""

from absence_hub.common.constants import (
    ACTIVE_STATUSES,
    STATUS_TRANSITIONS,
    AbsenceStatus,
    AbsenceType,
    BalanceKey,
    CountingStrategy,
    CountMode,
    LicenseSubtype,
    PolicyUnit,
)
from absence_hub.common.exceptions import (
    AppException,
    ConflictError,
    InvalidTransitionException,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "AbsenceStatus",
    "AbsenceType",
    "BalanceKey",
    "CountingStrategy",
    "CountMode",
    "LicenseSubtype",
    "PolicyUnit",
    "ACTIVE_STATUSES",
    "STATUS_TRANSITIONS",
    # Exceptions
    "AppException",
    "ConflictError",
    "InvalidTransitionException",
    "ValidationException",
    "register_exception_handlers",
]
