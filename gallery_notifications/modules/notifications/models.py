"""Notification and email-preference models."""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.dialects.postgresql import JSONB

from gallery_notifications.models.base import Base, new_uuid, timestamp_default, utcnow


class NotificationType(str, enum.Enum):
    COMMENT_PHOTO = "comment_photo"
    COMMENT_ALBUM = "comment_album"
    COMMENT_EVENT = "comment_event"
    COMMENT_CHALLENGE = "comment_challenge"
    COMMENT_REPLY = "comment_reply"


class Notification(Base):
    """In-app notification row shown in the recipient's feed."""

    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    actor_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    type = Column(String(32), nullable=False)
    entity_type = Column(String(16), nullable=True)
    entity_id = Column(String(36), nullable=True)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )
    seen_at = Column(DateTime(timezone=True), nullable=True)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)


class EmailType(Base):
    """Email category a member may opt out of (events, newsletter, notifications)."""

    __tablename__ = "email_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type_key = Column(String(32), nullable=False, unique=True)
    type_label = Column(String, nullable=False)
    description = Column(Text, nullable=True)


class EmailPreference(Base):
    """Per-member opt-out flag for one email category. No row means opted in."""

    __tablename__ = "email_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "email_type_id", name="uq_email_preference_user_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email_type_id = Column(
        Integer, ForeignKey("email_types.id", ondelete="CASCADE"), nullable=False
    )
    opted_out = Column(Boolean, nullable=False, default=False, server_default=false())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=timestamp_default(),
    )
