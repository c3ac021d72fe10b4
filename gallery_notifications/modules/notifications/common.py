"""Shared helpers and state for the notifications domain."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from cachetools import TTLCache

from gallery_notifications.core.exceptions import AppException

logger = logging.getLogger("gallery_notifications.notifications")

# Email category ids keyed by type_key. Categories are seeded once and rarely change.
email_type_cache: TTLCache = TTLCache(maxsize=32, ttl=600)

NOTIFICATIONS_EMAIL_TYPE = "notifications"
NEWSLETTER_EMAIL_TYPE = "newsletter"
EVENTS_EMAIL_TYPE = "events"
VALID_EMAIL_TYPES = (EVENTS_EMAIL_TYPE, NEWSLETTER_EMAIL_TYPE, NOTIFICATIONS_EMAIL_TYPE)

F = TypeVar("F", bound=Callable[..., Any])


def handle_async_errors(func: F) -> F:
    """Log unexpected errors from async service methods before re-raising them."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except AppException:
            raise
        except Exception as exc:
            logger.error("Error in %s: %s", func.__name__, exc)
            raise

    return wrapper  # type: ignore[return-value]


__all__ = [
    "logger",
    "email_type_cache",
    "NOTIFICATIONS_EMAIL_TYPE",
    "NEWSLETTER_EMAIL_TYPE",
    "EVENTS_EMAIL_TYPE",
    "VALID_EMAIL_TYPES",
    "handle_async_errors",
]
