"""Notification feed endpoints for the signed-in member."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from gallery_notifications import oauth2
from gallery_notifications.core.database import get_db
from gallery_notifications.modules.notifications.schemas import (
    NotificationFeed,
    NotificationOut,
    SeenAllResult,
)
from gallery_notifications.modules.notifications.service import NotificationFeedService
from gallery_notifications.modules.users.models import Profile

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_feed_service(db: Session = Depends(get_db)) -> NotificationFeedService:
    return NotificationFeedService(db)


@router.get("", response_model=NotificationFeed)
def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: Profile = Depends(oauth2.get_current_user),
    service: NotificationFeedService = Depends(get_feed_service),
):
    """Newest-first feed excluding dismissed items, with unseen and total counts."""
    return service.get_feed(current_user.id, limit=limit, offset=offset)


@router.post("/seen-all", response_model=SeenAllResult)
def mark_all_seen(
    current_user: Profile = Depends(oauth2.get_current_user),
    service: NotificationFeedService = Depends(get_feed_service),
):
    return SeenAllResult(updated=service.mark_all_seen(current_user.id))


@router.post("/{notification_id}/seen", response_model=NotificationOut)
def mark_seen(
    notification_id: str,
    current_user: Profile = Depends(oauth2.get_current_user),
    service: NotificationFeedService = Depends(get_feed_service),
):
    return service.mark_seen(notification_id, current_user.id)


@router.post("/{notification_id}/dismiss", status_code=status.HTTP_204_NO_CONTENT)
def dismiss(
    notification_id: str,
    current_user: Profile = Depends(oauth2.get_current_user),
    service: NotificationFeedService = Depends(get_feed_service),
):
    service.dismiss(notification_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
