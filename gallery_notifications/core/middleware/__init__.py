"""Core application middleware utilities.

Imported in app_factory to compose the middleware stack in the intended order.
"""

from .logging_middleware import LoggingMiddleware
from .rate_limit import limiter

__all__ = ["LoggingMiddleware", "limiter"]
