"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.orm import Session

from gallery_notifications.core.config import settings
from gallery_notifications.core.context import RequestContext
from gallery_notifications.core.database import get_db
from gallery_notifications.modules.comments.invalidation import (
    CacheInvalidator,
    get_cache_invalidator,
)
from gallery_notifications.modules.notifications.email import (
    EmailDispatcher,
    get_email_dispatcher,
)
from gallery_notifications.modules.notifications.tokens import (
    OptOutTokenMinter,
    get_token_minter,
)
from gallery_notifications.modules.users.models import Profile
from gallery_notifications.oauth2 import get_current_user


def get_request_context(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
    minter: OptOutTokenMinter = Depends(get_token_minter),
    invalidator: CacheInvalidator = Depends(get_cache_invalidator),
) -> RequestContext:
    return RequestContext(
        db=db,
        actor=current_user,
        settings=settings,
        dispatcher=dispatcher,
        minter=minter,
        invalidator=invalidator,
    )


__all__ = ["get_request_context"]
