"""Notification services: in-app writes, the member feed, email preferences and unsubscribe."""

from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import unquote

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gallery_notifications.core.exceptions import (
    DatabaseException,
    InvalidOptOutTokenException,
    ResourceNotFoundException,
    ValidationException,
)
from gallery_notifications.modules.users.models import Profile
from gallery_notifications.modules.users.service import get_profile

from . import models as notification_models
from .common import (
    NEWSLETTER_EMAIL_TYPE,
    VALID_EMAIL_TYPES,
    handle_async_errors,
    logger,
)
from .repository import NotificationRepository
from .schemas import (
    EmailPreferenceOut,
    NotificationActor,
    NotificationData,
    NotificationFeed,
    NotificationOut,
    UnsubscribeResult,
)
from .tokens import OptOutTokenError, read_opt_out_token


class InAppNotificationWriter:
    """Insert in-app notification rows.

    Writes are best-effort: a failed insert is rolled back and logged, and the
    caller carries on with the remaining recipients.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository(db)

    async def write(
        self,
        *,
        recipient_id: str,
        actor_id: Optional[str],
        notification_type: notification_models.NotificationType,
        entity_type: str,
        entity_id: str,
        data: NotificationData,
    ) -> Optional[notification_models.Notification]:
        try:
            return self.repository.create_notification(
                user_id=recipient_id,
                actor_id=actor_id,
                type=notification_type.value,
                entity_type=entity_type,
                entity_id=entity_id,
                data=data.model_dump(by_alias=True),
            )
        except Exception as exc:
            self.db.rollback()
            logger.error(
                "Failed to write %s notification for %s: %s",
                notification_type.value,
                recipient_id,
                exc,
                extra={"recipient_id": recipient_id, "entity_id": entity_id},
            )
            return None


class NotificationFeedService:
    """Read and update the signed-in member's notification feed."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository(db)

    def _actors(self, actor_ids: List[str]) -> Dict[str, NotificationActor]:
        if not actor_ids:
            return {}
        profiles = self.db.query(Profile).filter(Profile.id.in_(set(actor_ids))).all()
        return {
            profile.id: NotificationActor(
                nickname=profile.nickname,
                avatar_url=profile.avatar_url,
                full_name=profile.full_name,
            )
            for profile in profiles
        }

    def _to_out(
        self, notification: notification_models.Notification, actors: Dict[str, NotificationActor]
    ) -> NotificationOut:
        return NotificationOut(
            id=notification.id,
            type=notification.type,
            entity_type=notification.entity_type,
            entity_id=notification.entity_id,
            data=notification.data or {},
            created_at=notification.created_at,
            seen_at=notification.seen_at,
            actor=actors.get(notification.actor_id),
        )

    def get_feed(self, user_id: str, *, limit: int, offset: int) -> NotificationFeed:
        items = self.repository.build_feed_query(user_id).offset(offset).limit(limit).all()
        actors = self._actors([item.actor_id for item in items if item.actor_id])
        total = self.repository.count_active(user_id)
        return NotificationFeed(
            notifications=[self._to_out(item, actors) for item in items],
            unseen_count=self.repository.count_unseen(user_id),
            total_count=total,
            has_more=offset + len(items) < total,
        )

    def _owned(self, notification_id: str, user_id: str) -> notification_models.Notification:
        notification = self.repository.get_notification_for_user(notification_id, user_id)
        if notification is None:
            raise ResourceNotFoundException("Notification", notification_id)
        return notification

    def mark_seen(self, notification_id: str, user_id: str) -> NotificationOut:
        notification = self.repository.mark_seen(self._owned(notification_id, user_id))
        actors = self._actors([notification.actor_id] if notification.actor_id else [])
        return self._to_out(notification, actors)

    def mark_all_seen(self, user_id: str) -> int:
        return self.repository.mark_all_seen(user_id)

    def dismiss(self, notification_id: str, user_id: str) -> None:
        self.repository.dismiss(self._owned(notification_id, user_id))


class EmailPreferenceService:
    """List and change a member's per-category email opt-outs."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository(db)

    def list_for_user(self, user_id: str) -> List[EmailPreferenceOut]:
        opted_out = self.repository.list_preferences(user_id)
        return [
            EmailPreferenceOut(
                type_key=email_type.type_key,
                type_label=email_type.type_label,
                description=email_type.description,
                opted_out=opted_out.get(email_type.id, False),
            )
            for email_type in self.repository.list_email_types()
        ]

    def set_preference(
        self, profile: Profile, type_key: str, *, opted_out: bool
    ) -> EmailPreferenceOut:
        email_type = self.repository.get_email_type(type_key)
        if email_type is None:
            raise ResourceNotFoundException("Email type", type_key)
        try:
            self.repository.upsert_preference(
                profile.id, email_type.id, opted_out=opted_out, commit=False
            )
            if type_key == NEWSLETTER_EMAIL_TYPE:
                profile.newsletter_opt_in = not opted_out
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to update email preference for %s: %s", profile.id, exc)
            raise DatabaseException("Failed to update email preference")
        return EmailPreferenceOut(
            type_key=email_type.type_key,
            type_label=email_type.type_label,
            description=email_type.description,
            opted_out=opted_out,
        )


class UnsubscribeService:
    """Redeem one-click opt-out tokens. Redeeming the same token twice is harmless."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = NotificationRepository(db)

    @handle_async_errors
    async def redeem(self, token: Optional[str]) -> UnsubscribeResult:
        if not token:
            raise ValidationException("Missing unsubscribe token", field="token")
        try:
            payload = read_opt_out_token(unquote(token.strip()))
        except OptOutTokenError as exc:
            logger.warning("Rejected unsubscribe token: %s", exc)
            raise InvalidOptOutTokenException()

        type_key = payload.get("emailType") or NEWSLETTER_EMAIL_TYPE
        if type_key not in VALID_EMAIL_TYPES:
            raise ValidationException(f"Unknown email type: {type_key}", field="emailType")

        profile = get_profile(self.db, payload["userId"])
        if profile is None:
            raise ResourceNotFoundException("Profile", payload["userId"])

        email_type = self.repository.get_email_type(type_key)
        if email_type is None:
            raise ResourceNotFoundException("Email type", type_key)

        existing = self.repository.get_preference(profile.id, email_type.id)
        if existing is not None and existing.opted_out:
            return UnsubscribeResult(
                message=f"You are already unsubscribed from {email_type.type_label}",
                email_type=type_key,
                already_unsubscribed=True,
            )

        try:
            self.repository.upsert_preference(
                profile.id, email_type.id, opted_out=True, commit=False
            )
            if type_key == NEWSLETTER_EMAIL_TYPE:
                profile.newsletter_opt_in = False
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to record unsubscribe for %s: %s", profile.id, exc)
            raise DatabaseException("Failed to update email preferences")

        logger.info("Profile %s unsubscribed from %s emails", profile.id, type_key)
        return UnsubscribeResult(
            message=f"Successfully unsubscribed from {email_type.type_label}",
            email_type=type_key,
        )


__all__ = [
    "InAppNotificationWriter",
    "NotificationFeedService",
    "EmailPreferenceService",
    "UnsubscribeService",
]
