"""Per-client rate limiting (slowapi), keyed on the remote address.

The limiter is attached to ``app.state`` in main.py; routers tighten
individual endpoints with ``@limiter.limit(...)``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from absence_hub.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)
