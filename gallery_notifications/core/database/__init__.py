"""Core database access helpers.

Re-exports the engine, session factory and `get_db` dependency alongside the
declarative `Base` so callers have one import site.
"""

from gallery_notifications.models.base import Base

from .session import SessionLocal, build_engine, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db", "build_engine"]
