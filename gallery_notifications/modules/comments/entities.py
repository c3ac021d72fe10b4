"""Entity resolution for comment notifications.

Each commentable kind has its own lookup strategy producing a `ResolvedEntity`:
display title, thumbnail, canonical deep link and the people who should hear
about the comment (the owner, or the admin group for unowned kinds).
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from gallery_notifications.core.context import RequestContext
from gallery_notifications.modules.gallery.models import Album, AlbumPhoto, Challenge, Event, Photo
from gallery_notifications.modules.notifications.models import NotificationType
from gallery_notifications.modules.users.service import (
    Identity,
    get_identity,
    list_active_admins,
)

from .common import logger

UNTITLED_PHOTO = "Untitled photo"

_EVENT_ID_RE = re.compile(r"[0-9]+")
MAX_EVENT_ID = 2**63 - 1


def parse_event_id(raw: object) -> Optional[int]:
    """ASCII decimal id within the signed 64-bit range, else None."""
    text = "" if raw is None else str(raw).strip()
    if not _EVENT_ID_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= MAX_EVENT_ID else None


class EntityKind(str, enum.Enum):
    PHOTO = "photo"
    ALBUM = "album"
    EVENT = "event"
    CHALLENGE = "challenge"

    @property
    def notification_type(self) -> NotificationType:
        return NotificationType(f"comment_{self.value}")

    @property
    def notifies_admin_group(self) -> bool:
        return self in (EntityKind.EVENT, EntityKind.CHALLENGE)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["EntityKind"]:
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


@dataclass
class ResolvedEntity:
    kind: EntityKind
    entity_id: str
    title: str
    thumbnail: Optional[str] = None
    link: str = ""
    owner: Optional[Identity] = None
    admin_group: List[Identity] = field(default_factory=list)


def _first_album_slug(ctx: RequestContext, photo: Photo) -> Optional[str]:
    """Slug of an album owned by the photo's owner that contains the photo."""
    try:
        row = (
            ctx.db.query(Album.slug)
            .join(AlbumPhoto, AlbumPhoto.album_id == Album.id)
            .filter(AlbumPhoto.photo_id == photo.id, Album.user_id == photo.user_id)
            .order_by(AlbumPhoto.created_at, Album.id)
            .first()
        )
    except SQLAlchemyError as exc:
        ctx.db.rollback()
        logger.warning("Album lookup for photo %s failed: %s", photo.id, exc)
        return None
    return row.slug if row else None


def _resolve_photo(ctx: RequestContext, entity_id: str) -> Optional[ResolvedEntity]:
    photo = ctx.db.get(Photo, entity_id)
    if photo is None:
        return None
    owner = get_identity(ctx.db, photo.user_id)
    link = ""
    if owner and owner.nickname:
        album_slug = _first_album_slug(ctx, photo)
        if album_slug:
            link = f"{ctx.site_url}/@{owner.nickname}/album/{album_slug}/photo/{photo.short_id}#comments"
        else:
            link = f"{ctx.site_url}/@{owner.nickname}/photo/{photo.short_id}#comments"
    return ResolvedEntity(
        kind=EntityKind.PHOTO,
        entity_id=str(photo.id),
        title=photo.title or UNTITLED_PHOTO,
        thumbnail=photo.url,
        link=link,
        owner=owner,
    )


def _resolve_album(ctx: RequestContext, entity_id: str) -> Optional[ResolvedEntity]:
    album = ctx.db.get(Album, entity_id)
    if album is None:
        return None
    owner = get_identity(ctx.db, album.user_id)
    link = ""
    if owner and owner.nickname:
        link = f"{ctx.site_url}/@{owner.nickname}/album/{album.slug}#comments"
    return ResolvedEntity(
        kind=EntityKind.ALBUM,
        entity_id=str(album.id),
        title=album.title,
        thumbnail=album.cover_image_url,
        link=link,
        owner=owner,
    )


def _resolve_event(ctx: RequestContext, entity_id: str) -> Optional[ResolvedEntity]:
    event_id = parse_event_id(entity_id)
    if event_id is None:
        return None
    event = ctx.db.get(Event, event_id)
    if event is None:
        return None
    return ResolvedEntity(
        kind=EntityKind.EVENT,
        entity_id=str(event.id),
        title=event.title,
        thumbnail=event.cover_image,
        link=f"{ctx.site_url}/events/{event.slug}#comments",
        admin_group=list_active_admins(ctx.db, exclude=[ctx.actor.id]),
    )


def _resolve_challenge(ctx: RequestContext, entity_id: str) -> Optional[ResolvedEntity]:
    challenge = ctx.db.get(Challenge, entity_id)
    if challenge is None:
        return None
    return ResolvedEntity(
        kind=EntityKind.CHALLENGE,
        entity_id=str(challenge.id),
        title=challenge.title,
        thumbnail=challenge.cover_image_url,
        link=f"{ctx.site_url}/challenges/{challenge.slug}#comments",
        admin_group=list_active_admins(ctx.db, exclude=[ctx.actor.id]),
    )


Strategy = Callable[[RequestContext, str], Optional[ResolvedEntity]]


class EntityResolver:
    """Dispatch to the lookup strategy registered for each entity kind."""

    strategies: Dict[EntityKind, Strategy] = {
        EntityKind.PHOTO: _resolve_photo,
        EntityKind.ALBUM: _resolve_album,
        EntityKind.EVENT: _resolve_event,
        EntityKind.CHALLENGE: _resolve_challenge,
    }

    def resolve(
        self, ctx: RequestContext, kind: EntityKind, entity_id: str
    ) -> Optional[ResolvedEntity]:
        """Return the resolved entity, or None when it no longer exists."""
        strategy = self.strategies[kind]
        resolved = strategy(ctx, str(entity_id))
        if resolved is None:
            logger.info(
                "Comment target %s %s could not be resolved; skipping notifications.",
                kind.value,
                entity_id,
                extra={"entity_type": kind.value, "entity_id": str(entity_id)},
            )
        return resolved


__all__ = ["EntityKind", "ResolvedEntity", "EntityResolver", "UNTITLED_PHOTO"]
