"""JSON error envelope shared by every route.

All failures render as ``{success: false, error: {code, message, details},
timestamp, path}``. Request validation is reported as a 400 with the first
offending field in ``details.field``, the same shape ``ValidationException``
produces from the services.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from gallery_notifications.core.exceptions import AppException

logger = logging.getLogger(__name__)

_DEBUG_ENVIRONMENTS = {"development", "dev", "test"}


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[dict] = None,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    content = {
        "success": False,
        "error": {"code": error_code, "message": message, "details": details or {}},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if path:
        content["path"] = path
    return JSONResponse(status_code=status_code, content=content, headers=dict(headers or {}))


def _request_extra(request: Request, **extra) -> dict:
    return {"path": request.url.path, "method": request.method, **extra}


def _field_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": error.get("msg"), "type": error.get("type")})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "%s %s -> %s",
            request.method,
            request.url.path,
            exc.error_code,
            extra=_request_extra(request, error_code=exc.error_code, details=exc.details),
        )
        return create_error_response(
            exc.status_code,
            exc.error_code,
            exc.message,
            details=exc.details,
            path=request.url.path,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        logger.warning(
            "Rejected malformed request to %s",
            request.url.path,
            extra=_request_extra(request, errors=errors),
        )
        details = {"errors": errors}
        if errors and errors[0]["field"]:
            details["field"] = errors[0]["field"]
        return create_error_response(
            status.HTTP_400_BAD_REQUEST,
            "validation_error",
            "Request validation failed",
            details=details,
            path=request.url.path,
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(
            "Throttled %s on %s",
            client_ip,
            request.url.path,
            extra=_request_extra(request, client_ip=client_ip),
        )
        return create_error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limit_exceeded",
            "Too many requests. Please try again later.",
            details={"limit": str(exc.detail)},
            path=request.url.path,
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Database error on %s: %s",
            request.url.path,
            exc,
            extra=_request_extra(request, error_type=type(exc).__name__),
            exc_info=True,
        )
        return create_error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "database_error",
            "A database error occurred. Please try again later.",
            path=request.url.path,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled %s on %s",
            type(exc).__name__,
            request.url.path,
            extra=_request_extra(request, error_type=type(exc).__name__),
            exc_info=True,
        )
        message = "An unexpected error occurred. Please try again later."
        details = {}
        env = getattr(request.app.state, "environment", "production").lower()
        if env in _DEBUG_ENVIRONMENTS:
            message = str(exc)
            details = {
                "error_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n"),
            }
        return create_error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_server_error",
            message,
            details=details,
            path=request.url.path,
        )


__all__ = ["create_error_response", "register_exception_handlers"]
