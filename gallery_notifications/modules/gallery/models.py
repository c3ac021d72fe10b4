"""Gallery content models.

Photos and albums belong to a member; albums may also be system-owned (no owner).
Events and challenges have no owner and are moderated by the admin group.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from gallery_notifications.models.base import Base, new_uuid, timestamp_default, utcnow


class Photo(Base):
    __tablename__ = "photos"

    id = Column(String(36), primary_key=True, default=new_uuid)
    short_id = Column(String(16), nullable=False, unique=True, index=True)
    title = Column(String, nullable=True)
    url = Column(Text, nullable=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )


class Album(Base):
    __tablename__ = "albums"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)
    cover_image_url = Column(Text, nullable=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )


class AlbumPhoto(Base):
    """Membership of a photo in an album; a photo may sit in several albums."""

    __tablename__ = "album_photos"
    __table_args__ = (UniqueConstraint("album_id", "photo_id", name="uq_album_photo"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    album_id = Column(
        String(36), ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True
    )
    photo_id = Column(
        String(36), ForeignKey("photos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    cover_image = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )


class Challenge(Base):
    __tablename__ = "challenges"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    cover_image_url = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=timestamp_default()
    )
