"""Email preference endpoints for the signed-in member."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gallery_notifications import oauth2
from gallery_notifications.core.database import get_db
from gallery_notifications.modules.notifications.schemas import (
    EmailPreferenceOut,
    EmailPreferenceUpdate,
)
from gallery_notifications.modules.notifications.service import EmailPreferenceService
from gallery_notifications.modules.users.models import Profile

router = APIRouter(prefix="/email-preferences", tags=["Email Preferences"])


def get_preference_service(db: Session = Depends(get_db)) -> EmailPreferenceService:
    return EmailPreferenceService(db)


@router.get("", response_model=List[EmailPreferenceOut])
def list_preferences(
    current_user: Profile = Depends(oauth2.get_current_user),
    service: EmailPreferenceService = Depends(get_preference_service),
):
    """Every email category with the member's current opt-out state."""
    return service.list_for_user(current_user.id)


@router.put("/{type_key}", response_model=EmailPreferenceOut)
def update_preference(
    type_key: str,
    payload: EmailPreferenceUpdate,
    current_user: Profile = Depends(oauth2.get_current_user),
    service: EmailPreferenceService = Depends(get_preference_service),
):
    return service.set_preference(current_user, type_key, opted_out=payload.opted_out)
