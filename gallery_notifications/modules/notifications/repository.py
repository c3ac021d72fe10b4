"""Data-access helpers for notifications domain."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from gallery_notifications.models.base import utcnow
from gallery_notifications.modules.notifications import models as notification_models


class NotificationRepository:
    """Encapsulate notification and email-preference database operations."""

    def __init__(self, db: Session):
        self.db = db

    # ----------------------------------------------------------- email types
    def get_email_type(self, type_key: str) -> Optional[notification_models.EmailType]:
        return (
            self.db.query(notification_models.EmailType)
            .filter(notification_models.EmailType.type_key == type_key)
            .first()
        )

    def list_email_types(self) -> List[notification_models.EmailType]:
        return (
            self.db.query(notification_models.EmailType)
            .order_by(notification_models.EmailType.id)
            .all()
        )

    # ----------------------------------------------------------------- prefs
    def opted_out_user_ids(self, email_type_id: int, user_ids: Iterable[str]) -> Set[str]:
        """Return the subset of `user_ids` opted out of the category, in one query."""
        candidates = {str(user_id) for user_id in user_ids}
        if not candidates:
            return set()
        rows = (
            self.db.query(notification_models.EmailPreference.user_id)
            .filter(
                notification_models.EmailPreference.email_type_id == email_type_id,
                notification_models.EmailPreference.user_id.in_(candidates),
                notification_models.EmailPreference.opted_out.is_(True),
            )
            .all()
        )
        return {str(row.user_id) for row in rows}

    def get_preference(
        self, user_id: str, email_type_id: int
    ) -> Optional[notification_models.EmailPreference]:
        return (
            self.db.query(notification_models.EmailPreference)
            .filter(
                notification_models.EmailPreference.user_id == user_id,
                notification_models.EmailPreference.email_type_id == email_type_id,
            )
            .first()
        )

    def list_preferences(self, user_id: str) -> Dict[int, bool]:
        rows = (
            self.db.query(notification_models.EmailPreference)
            .filter(notification_models.EmailPreference.user_id == user_id)
            .all()
        )
        return {row.email_type_id: bool(row.opted_out) for row in rows}

    def upsert_preference(
        self, user_id: str, email_type_id: int, *, opted_out: bool, commit: bool = True
    ) -> notification_models.EmailPreference:
        preference = self.get_preference(user_id, email_type_id)
        if preference is None:
            preference = notification_models.EmailPreference(
                user_id=user_id, email_type_id=email_type_id
            )
            self.db.add(preference)
        preference.opted_out = opted_out
        preference.updated_at = utcnow()
        if commit:
            self.db.commit()
            self.db.refresh(preference)
        return preference

    # --------------------------------------------------------------- queries
    def build_feed_query(self, user_id: str) -> Query:
        return (
            self.db.query(notification_models.Notification)
            .filter(
                notification_models.Notification.user_id == user_id,
                notification_models.Notification.dismissed_at.is_(None),
            )
            .order_by(
                notification_models.Notification.created_at.desc(),
                notification_models.Notification.id.desc(),
            )
        )

    def count_active(self, user_id: str) -> int:
        return (
            self.db.query(func.count(notification_models.Notification.id))
            .filter(
                notification_models.Notification.user_id == user_id,
                notification_models.Notification.dismissed_at.is_(None),
            )
            .scalar()
            or 0
        )

    def count_unseen(self, user_id: str) -> int:
        return (
            self.db.query(func.count(notification_models.Notification.id))
            .filter(
                notification_models.Notification.user_id == user_id,
                notification_models.Notification.dismissed_at.is_(None),
                notification_models.Notification.seen_at.is_(None),
            )
            .scalar()
            or 0
        )

    def get_notification_for_user(
        self, notification_id: str, user_id: str
    ) -> Optional[notification_models.Notification]:
        return (
            self.db.query(notification_models.Notification)
            .filter(
                notification_models.Notification.id == notification_id,
                notification_models.Notification.user_id == user_id,
                notification_models.Notification.dismissed_at.is_(None),
            )
            .first()
        )

    # ------------------------------------------------------------- mutations
    def create_notification(self, **payload: Any) -> notification_models.Notification:
        notification = notification_models.Notification(**payload)
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_seen(
        self, notification: notification_models.Notification, *, when: Optional[datetime] = None
    ) -> notification_models.Notification:
        if notification.seen_at is None:
            notification.seen_at = when or utcnow()
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_seen(self, user_id: str) -> int:
        updated = (
            self.db.query(notification_models.Notification)
            .filter(
                notification_models.Notification.user_id == user_id,
                notification_models.Notification.dismissed_at.is_(None),
                notification_models.Notification.seen_at.is_(None),
            )
            .update({"seen_at": utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def dismiss(self, notification: notification_models.Notification) -> None:
        notification.dismissed_at = utcnow()
        self.db.commit()


__all__ = ["NotificationRepository"]
