"""Logging configuration.

Console output plus optional rotating files, with JSON records when `USE_JSON_LOGS` is on.
Request-scoped contextvars (request_id, user_id, ip) are stamped onto every record so
a comment's fan-out log lines can be tied back to the request that created it.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
ip_ctx: ContextVar[Optional[str]] = ContextVar("ip_address", default=None)

_CONTEXT_VARS = {
    "request_id": request_id_ctx,
    "user_id": user_id_ctx,
    "ip_address": ip_ctx,
}

# Record attributes copied into JSON output when present.
_EXTRA_FIELDS = (
    "request_id",
    "user_id",
    "ip_address",
    "endpoint",
    "method",
    "status_code",
    "duration",
    "comment_id",
    "entity_type",
    "entity_id",
    "recipient_id",
    "error_code",
)

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
ACCESS_FORMAT = "%(asctime)s | %(method)s %(endpoint)s | %(status_code)s | %(duration)sms"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """Emit logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ContextEnricher(logging.Filter):
    """Inject contextvars (request_id, user_id, ip_address) into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, var in _CONTEXT_VARS.items():
            value = var.get()
            if value and not hasattr(record, name):
                setattr(record, name, value)
        return True


def bind_request_context(
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> List[Tuple[str, object]]:
    """Bind request context into contextvars; returns tokens for reset."""
    values = {"request_id": request_id, "user_id": user_id, "ip_address": ip_address}
    return [
        (name, _CONTEXT_VARS[name].set(value))
        for name, value in values.items()
        if value is not None
    ]


def reset_request_context(tokens) -> None:
    """Reset bound contextvars using tokens returned by bind_request_context."""
    for name, token in reversed(tokens):
        _CONTEXT_VARS[name].reset(token)


def _reset_handlers(logger: logging.Logger) -> None:
    """Close and remove any existing handlers to avoid descriptor leaks."""
    for handler in list(logger.handlers):
        try:
            handler.flush()
        finally:
            handler.close()
            logger.removeHandler(handler)


def _rotating_handler(
    path: Path, level: int, formatter: logging.Formatter, max_bytes: int, backup_count: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    app_name: str = "gallery_notifications",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    use_json: bool = False,
) -> None:
    """Configure root logging.

    Args:
        log_level: Minimum logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory to store log files; if None, logs only to console.
        app_name: Application name used in log filenames.
        max_bytes: Max size per log file before rotation.
        backup_count: Number of rotated files to keep.
        use_json: If True, every handler emits JSON records.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    context_filter = ContextEnricher()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _reset_handlers(root_logger)
    for existing in list(root_logger.filters):
        if isinstance(existing, ContextEnricher):
            root_logger.removeFilter(existing)
    root_logger.addFilter(context_filter)

    text_formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    formatter = JSONFormatter() if use_json else text_formatter

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    access_logger = logging.getLogger("access")
    _reset_handlers(access_logger)
    access_logger.setLevel(logging.INFO)
    access_logger.addFilter(context_filter)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}.log", logging.DEBUG, formatter, max_bytes, backup_count
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_error.log",
                logging.ERROR,
                formatter,
                max_bytes,
                backup_count,
            )
        )
        access_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_access.log",
                logging.INFO,
                JSONFormatter() if use_json else logging.Formatter(ACCESS_FORMAT, datefmt=DATE_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        access_logger.propagate = False
    else:
        access_logger.propagate = True

    for noisy in ("urllib3", "asyncio", "multipart", "aiosmtplib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured. Level: %s, Directory: %s", log_level, log_dir or "console only"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: float,
    ip_address: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> None:
    """Log an HTTP request on the dedicated `access` logger."""
    extra = {
        "method": method,
        "endpoint": endpoint,
        "status_code": status_code,
        "duration": f"{duration_ms:.2f}",
        "ip_address": ip_address,
    }
    if user_id:
        extra["user_id"] = user_id
    if request_id:
        extra["request_id"] = request_id

    logging.getLogger("access").info(
        f"{method} {endpoint} - {status_code} - {duration_ms:.2f}ms", extra=extra
    )


__all__ = [
    "JSONFormatter",
    "ContextEnricher",
    "bind_request_context",
    "reset_request_context",
    "setup_logging",
    "get_logger",
    "log_request",
]
