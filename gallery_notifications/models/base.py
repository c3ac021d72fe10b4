"""Shared SQLAlchemy declarative base and column helpers for all ORM models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text

Base = declarative_base()


def timestamp_default():
    """Return a server-side timestamp default portable across dialects."""
    return text("CURRENT_TIMESTAMP")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


__all__ = ["Base", "timestamp_default", "utcnow", "new_uuid"]
