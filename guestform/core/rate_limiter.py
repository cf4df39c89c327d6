"""
Rate limiter configuration module.

Kept separate from main.py so routers can import `limiter` for the
@limiter.limit() decorator without a circular import.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from guestform.core.config import settings

# key_func: client IP; enabled: RATE_LIMIT_ENABLED killswitch
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)
