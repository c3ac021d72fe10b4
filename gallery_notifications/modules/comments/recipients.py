"""Recipient selection for a new comment.

Rules, applied in order:
- A reply notifies the parent comment's author, unless that is the commenter.
- On photos and albums a reply notifies only that author; the owner is left out
  even when they are a different person.
- On events and challenges the admin group is notified in addition to the reply
  target, minus the reply target themself.
- Nobody is ever notified about their own comment.
- Suspended accounts are never notified. A reply to a suspended author is
  routed like a top-level comment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from gallery_notifications.core.context import RequestContext
from gallery_notifications.modules.users.service import Identity, get_identity

from .common import logger
from .entities import ResolvedEntity
from .models import Comment


@dataclass
class RecipientSet:
    primary: List[Identity] = field(default_factory=list)
    reply_target: Optional[Identity] = None

    def __bool__(self) -> bool:
        return bool(self.primary) or self.reply_target is not None

    @property
    def everyone(self) -> List[Identity]:
        people = list(self.primary)
        if self.reply_target is not None:
            people.insert(0, self.reply_target)
        return people


def _reply_target(ctx: RequestContext, comment: Comment) -> Optional[Identity]:
    if not comment.parent_comment_id:
        return None
    try:
        parent = ctx.db.get(Comment, comment.parent_comment_id)
    except SQLAlchemyError as exc:
        ctx.db.rollback()
        logger.warning("Parent lookup for comment %s failed: %s", comment.id, exc)
        return None
    if parent is None or str(parent.author_id) == str(comment.author_id):
        return None
    target = get_identity(ctx.db, parent.author_id)
    if target is None or target.suspended:
        return None
    return target


def build_recipients(
    ctx: RequestContext, comment: Comment, entity: ResolvedEntity
) -> RecipientSet:
    author_id = str(comment.author_id)
    reply_target = _reply_target(ctx, comment)

    if entity.kind.notifies_admin_group:
        candidates = list(entity.admin_group)
    elif reply_target is not None:
        candidates = []
    else:
        candidates = [entity.owner] if entity.owner else []

    excluded = {author_id}
    if reply_target is not None:
        excluded.add(reply_target.id)

    primary: List[Identity] = []
    for person in candidates:
        if person.id in excluded or person.suspended:
            continue
        excluded.add(person.id)
        primary.append(person)

    return RecipientSet(primary=primary, reply_target=reply_target)


__all__ = ["RecipientSet", "build_recipients"]
