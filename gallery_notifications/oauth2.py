"""JWT utilities for auth.

Responsibilities:
- Create and verify HMAC-signed access tokens carrying the caller's profile id.
- Resolve the current profile, rejecting unknown ids (401) and suspended accounts (403).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from gallery_notifications.core.config import settings
from gallery_notifications.core.database import get_db
from gallery_notifications.core.exceptions import (
    AccountSuspendedException,
    AuthenticationException,
    InvalidTokenException,
)
from gallery_notifications.modules.users.models import Profile

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Sign `data` (which must carry `user_id`) with an expiry claim."""
    to_encode = data.copy()
    if "user_id" in to_encode:
        to_encode["user_id"] = str(to_encode["user_id"])
    minutes = expires_minutes or settings.access_token_expire_minutes
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_access_token(token: str) -> str:
    """Return the profile id carried by `token` or raise InvalidTokenException."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"JWT Error: {str(e)}")
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    if not user_id:
        logger.warning("User ID not found in token payload")
        raise InvalidTokenException()
    return str(user_id)


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    """Return the authenticated, non-suspended profile."""
    if not token:
        raise AuthenticationException()

    user_id = verify_access_token(token)
    profile = db.get(Profile, user_id)
    if profile is None:
        raise InvalidTokenException()
    if profile.is_suspended:
        raise AccountSuspendedException()

    request.state.user_id = profile.id
    return profile


__all__ = ["create_access_token", "verify_access_token", "get_current_user", "oauth2_scheme"]
