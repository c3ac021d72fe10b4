"""Request-scoped collaborators handed to the comment notification pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from gallery_notifications.core.config import Settings

if TYPE_CHECKING:
    from gallery_notifications.modules.comments.invalidation import CacheInvalidator
    from gallery_notifications.modules.notifications.email import EmailDispatcher
    from gallery_notifications.modules.notifications.tokens import OptOutTokenMinter
    from gallery_notifications.modules.users.models import Profile


@dataclass
class RequestContext:
    """Everything one comment request needs, built per request and passed explicitly."""

    db: Session
    actor: "Profile"
    settings: Settings
    dispatcher: "EmailDispatcher"
    minter: "OptOutTokenMinter"
    invalidator: "CacheInvalidator"

    @property
    def site_url(self) -> str:
        return self.settings.site_url

    @property
    def fanout_concurrency(self) -> int:
        return max(1, int(self.settings.NOTIFICATION_FANOUT_CONCURRENCY))


__all__ = ["RequestContext"]
