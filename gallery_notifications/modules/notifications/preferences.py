"""Email preference gate.

Members are opted in by default: only an explicit `opted_out` row for the category
removes someone from an email fan-out. A category that has not been seeded yet
blocks nobody.
"""

from __future__ import annotations

from typing import Iterable, Optional, Set

from sqlalchemy.orm import Session

from .common import NOTIFICATIONS_EMAIL_TYPE, email_type_cache, logger
from .repository import NotificationRepository


def resolve_email_type_id(
    repository: NotificationRepository, type_key: str
) -> Optional[int]:
    if type_key in email_type_cache:
        return email_type_cache[type_key]
    email_type = repository.get_email_type(type_key)
    if email_type is None:
        return None
    email_type_cache[type_key] = email_type.id
    return email_type.id


class PreferenceGate:
    """Filter candidate recipients down to those who may be emailed."""

    def __init__(self, db: Session):
        self.repository = NotificationRepository(db)

    def filter_eligible(
        self, user_ids: Iterable[str], category_key: str = NOTIFICATIONS_EMAIL_TYPE
    ) -> Set[str]:
        """Return the eligible subset of `user_ids` using one batched opt-out lookup."""
        candidates = {str(user_id) for user_id in user_ids if user_id}
        if not candidates:
            return set()

        email_type_id = resolve_email_type_id(self.repository, category_key)
        if email_type_id is None:
            logger.warning(
                "Email type %r is not configured; treating all recipients as opted in.",
                category_key,
            )
            return candidates

        opted_out = self.repository.opted_out_user_ids(email_type_id, candidates)
        return candidates - opted_out


__all__ = ["PreferenceGate", "resolve_email_type_id"]
