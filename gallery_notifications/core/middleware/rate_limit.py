"""Request throttling for write endpoints.

Comment posting is the only route that triggers fan-out, so it carries its own
limit (``COMMENT_RATE_LIMIT``). Callers are keyed by bearer token when one is
present so members behind a shared NAT do not throttle each other.
"""

import hashlib
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from gallery_notifications.core.config import settings


def caller_key(request: Request) -> str:
    """Key by a digest of the bearer token, or by client address for anonymous calls."""
    auth = request.headers.get("Authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return "token:" + hashlib.sha256(credentials.encode()).hexdigest()[:32]
    return "ip:" + get_remote_address(request)


class _NoOpLimiter:
    enabled = False

    def limit(self, *args, **kwargs):
        def decorator(func):
            return func

        return decorator


def build_limiter():
    if os.getenv("APP_ENV", settings.environment).lower() == "test":
        return _NoOpLimiter()
    return Limiter(key_func=caller_key, default_limits=["300 per minute"])


limiter = build_limiter()

__all__ = ["caller_key", "limiter"]
