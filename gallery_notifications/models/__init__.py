"""Model registry.

Importing this package registers every table on `Base.metadata`, which Alembic
and the test fixtures rely on.
"""

from gallery_notifications.models.base import Base
from gallery_notifications.modules.users.models import Profile
from gallery_notifications.modules.gallery.models import (
    Album,
    AlbumPhoto,
    Challenge,
    Event,
    Photo,
)
from gallery_notifications.modules.comments.models import Comment
from gallery_notifications.modules.notifications.models import (
    EmailPreference,
    EmailType,
    Notification,
    NotificationType,
)

__all__ = [
    "Base",
    "Profile",
    "Photo",
    "Album",
    "AlbumPhoto",
    "Event",
    "Challenge",
    "Comment",
    "Notification",
    "NotificationType",
    "EmailType",
    "EmailPreference",
]
