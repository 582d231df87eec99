# activity_sessions/core/limiter.py
"""
Shared slowapi limiter, keyed by client IP.
Kept apart from main.py so endpoint modules can import it.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from activity_sessions.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# Applied to session join/leave
MEMBERSHIP_RATE_LIMIT = settings.MEMBERSHIP_RATE_LIMIT
