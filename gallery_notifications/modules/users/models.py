"""Profile model for community members."""

from sqlalchemy import Boolean, Column, DateTime, String, false, true

from gallery_notifications.models.base import Base, new_uuid, timestamp_default, utcnow


class Profile(Base):
    """A community member. Admins moderate events and challenges."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String, nullable=True, index=True)
    full_name = Column(String, nullable=True)
    nickname = Column(String, nullable=True, unique=True, index=True)
    avatar_url = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())
    suspended_at = Column(DateTime(timezone=True), nullable=True)
    newsletter_opt_in = Column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=timestamp_default(),
    )

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None
