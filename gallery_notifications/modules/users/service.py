"""Profile lookups and display helpers shared by the comment and notification flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from .models import Profile


@dataclass(frozen=True)
class Identity:
    """Detached snapshot of the profile fields notification routing needs."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    suspended: bool = False

    @classmethod
    def from_profile(cls, profile: Profile) -> "Identity":
        return cls(
            id=str(profile.id),
            email=profile.email,
            full_name=profile.full_name,
            nickname=profile.nickname,
            avatar_url=profile.avatar_url,
            suspended=profile.is_suspended,
        )

    def display_name(self, fallback: str) -> str:
        """Full name, else the local part of the email, else `fallback`."""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        if self.email and "@" in self.email:
            local_part = self.email.split("@", 1)[0]
            if local_part:
                return local_part
        return fallback

    def profile_link(self, site_url: str) -> Optional[str]:
        if not self.nickname:
            return None
        return f"{site_url}/@{self.nickname}"


def get_profile(db: Session, profile_id: Optional[str]) -> Optional[Profile]:
    if not profile_id:
        return None
    return db.get(Profile, str(profile_id))


def get_identity(db: Session, profile_id: Optional[str]) -> Optional[Identity]:
    profile = get_profile(db, profile_id)
    return Identity.from_profile(profile) if profile else None


def list_active_admins(db: Session, *, exclude: Iterable[str] = ()) -> List[Identity]:
    """Admins who are not suspended, minus the ids in `exclude`."""
    excluded = {str(user_id) for user_id in exclude if user_id}
    query = db.query(Profile).filter(
        Profile.is_admin.is_(True), Profile.suspended_at.is_(None)
    )
    if excluded:
        query = query.filter(Profile.id.notin_(excluded))
    return [Identity.from_profile(profile) for profile in query.order_by(Profile.id).all()]


__all__ = ["Identity", "get_profile", "get_identity", "list_active_admins"]
