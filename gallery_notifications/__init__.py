"""Comment notification service for the community photo gallery."""

from gallery_notifications.core.config import settings
from gallery_notifications.core.database import Base, SessionLocal, engine, get_db

__all__ = ["settings", "Base", "SessionLocal", "engine", "get_db"]
