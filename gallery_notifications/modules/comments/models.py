"""Comment model.

A comment targets exactly one entity. The entity type is stored alongside one
populated foreign key column; replies point at their parent comment.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from gallery_notifications.models.base import Base, new_uuid, timestamp_default, utcnow


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_entity", "entity_type", "photo_id", "album_id", "event_id", "challenge_id"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    entity_type = Column(String(16), nullable=False)
    photo_id = Column(String(36), ForeignKey("photos.id", ondelete="CASCADE"), nullable=True)
    album_id = Column(String(36), ForeignKey("albums.id", ondelete="CASCADE"), nullable=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True)
    challenge_id = Column(
        String(36), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=True
    )
    author_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    comment_text = Column(Text, nullable=False)
    parent_comment_id = Column(
        String(36), ForeignKey("comments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    author = relationship("Profile", lazy="joined")
    parent = relationship("Comment", remote_side=[id])

    ENTITY_COLUMNS = {
        "photo": "photo_id",
        "album": "album_id",
        "event": "event_id",
        "challenge": "challenge_id",
    }

    @property
    def entity_id(self) -> str:
        column = self.ENTITY_COLUMNS.get(self.entity_type)
        value = getattr(self, column) if column else None
        return str(value) if value is not None else ""

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
