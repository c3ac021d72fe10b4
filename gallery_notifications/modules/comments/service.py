"""Comment creation orchestrator and comment maintenance.

`create_comment` moves through Validating, Persisting, RoutingNotifications and
Done. Only the first two can fail the request; once the row is committed the
caller gets success whatever happens to notifications downstream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from gallery_notifications.core.cache.redis_cache import cached_query
from gallery_notifications.core.context import RequestContext
from gallery_notifications.core.exceptions import (
    DatabaseException,
    OwnershipRequiredException,
    ResourceNotFoundException,
    ValidationException,
)
from gallery_notifications.models.base import utcnow
from gallery_notifications.modules.gallery.models import Album, Challenge, Event, Photo

from .common import MAX_COMMENT_LENGTH, logger
from .entities import EntityKind, EntityResolver, ResolvedEntity, parse_event_id
from .fanout import FanoutReport, NotificationFanout
from .invalidation import comment_list_key, comment_list_scope
from .models import Comment
from .recipients import build_recipients
from .schemas import CommentAuthor, CommentCreate, CommentCreated, CommentList, CommentOut

ENTITY_MODELS = {
    EntityKind.PHOTO: Photo,
    EntityKind.ALBUM: Album,
    EntityKind.EVENT: Event,
    EntityKind.CHALLENGE: Challenge,
}


@dataclass
class CommentTarget:
    kind: EntityKind
    entity_id: str

    @property
    def key(self) -> Union[int, str]:
        """Primary key value in the entity's own type (events use integer ids)."""
        return int(self.entity_id) if self.kind is EntityKind.EVENT else self.entity_id

    @property
    def column(self) -> str:
        return Comment.ENTITY_COLUMNS[self.kind.value]


@dataclass
class ValidatedComment:
    target: CommentTarget
    text: str
    parent_comment_id: Optional[str] = None


def parse_target(entity_type: Optional[str], entity_id: Optional[Union[int, str]]) -> CommentTarget:
    if not entity_type:
        raise ValidationException("entityType is required", field="entityType")
    kind = EntityKind.parse(entity_type)
    if kind is None:
        raise ValidationException(f"Invalid entity type: {entity_type}", field="entityType")

    raw_id = "" if entity_id is None else str(entity_id).strip()
    if not raw_id:
        raise ValidationException("entityId is required", field="entityId")
    if kind is EntityKind.EVENT:
        event_id = parse_event_id(raw_id)
        if event_id is None:
            raise ValidationException("Event ids must be numeric", field="entityId")
        raw_id = str(event_id)
    return CommentTarget(kind=kind, entity_id=raw_id)


def validate_comment_request(payload: CommentCreate) -> ValidatedComment:
    target = parse_target(payload.entity_type, payload.entity_id)
    text = (payload.comment_text or "").strip()
    if not text:
        raise ValidationException("commentText is required", field="commentText")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationException(
            f"Comments are limited to {MAX_COMMENT_LENGTH} characters", field="commentText"
        )
    parent_id = (payload.parent_comment_id or "").strip() or None
    return ValidatedComment(target=target, text=text, parent_comment_id=parent_id)


def _comment_out(comment: Comment) -> CommentOut:
    author = None
    if comment.author is not None:
        author = CommentAuthor(
            id=comment.author.id,
            full_name=comment.author.full_name,
            nickname=comment.author.nickname,
            avatar_url=comment.author.avatar_url,
        )
    return CommentOut(
        id=comment.id,
        entity_type=comment.entity_type,
        entity_id=comment.entity_id,
        comment_text=comment.comment_text,
        parent_comment_id=comment.parent_comment_id,
        created_at=comment.created_at,
        author=author,
    )


class CommentService:
    def __init__(self, ctx: RequestContext, resolver: Optional[EntityResolver] = None):
        self.ctx = ctx
        self.db = ctx.db
        self.resolver = resolver or EntityResolver()

    # --------------------------------------------------------------- create
    async def create_comment(self, payload: CommentCreate) -> CommentCreated:
        request = validate_comment_request(payload)
        comment = self._persist(request)
        comment_id = comment.id
        await self.route_notifications(comment, request.target)
        return CommentCreated(comment_id=comment_id)

    def _check_target(self, request: ValidatedComment) -> None:
        target = request.target
        if self.db.get(ENTITY_MODELS[target.kind], target.key) is None:
            raise ResourceNotFoundException(target.kind.value.capitalize(), target.entity_id)

        if request.parent_comment_id is None:
            return
        parent = self.db.get(Comment, request.parent_comment_id)
        if parent is None or parent.is_deleted:
            raise ValidationException("Parent comment not found", field="parentCommentId")
        if parent.entity_type != target.kind.value or parent.entity_id != target.entity_id:
            raise ValidationException(
                "Parent comment belongs to a different entity", field="parentCommentId"
            )

    def _persist(self, request: ValidatedComment) -> Comment:
        self._check_target(request)
        target = request.target
        comment = Comment(
            entity_type=target.kind.value,
            author_id=self.ctx.actor.id,
            comment_text=request.text,
            parent_comment_id=request.parent_comment_id,
            **{target.column: target.key},
        )
        try:
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(
                "Failed to persist comment on %s %s: %s",
                target.kind.value,
                target.entity_id,
                exc,
                extra={"entity_type": target.kind.value, "entity_id": target.entity_id},
            )
            raise DatabaseException("Failed to create comment")
        logger.info(
            "Comment %s created on %s %s",
            comment.id,
            target.kind.value,
            target.entity_id,
            extra={"comment_id": comment.id, "entity_type": target.kind.value},
        )
        return comment

    async def route_notifications(
        self, comment: Comment, target: CommentTarget
    ) -> Optional[FanoutReport]:
        """Notify recipients and refresh caches. Never raises."""
        comment_id = comment.id
        entity: Optional[ResolvedEntity] = None
        report: Optional[FanoutReport] = None
        try:
            entity = self.resolver.resolve(self.ctx, target.kind, target.entity_id)
            if entity is not None:
                recipients = build_recipients(self.ctx, comment, entity)
                if recipients:
                    report = await NotificationFanout(self.ctx).dispatch(
                        comment, entity, recipients
                    )
        except Exception:
            self.db.rollback()
            logger.exception(
                "Notification routing failed for comment %s",
                comment_id,
                extra={"comment_id": comment_id},
            )

        invalidator = self.ctx.invalidator
        await invalidator.invalidate(
            invalidator.scopes_for(target.kind, target.entity_id, entity)
        )
        return report

    # --------------------------------------------------------------- delete
    async def delete_comment(self, comment_id: str) -> None:
        comment = self.db.get(Comment, comment_id)
        if comment is None or comment.is_deleted:
            raise ResourceNotFoundException("Comment", comment_id)

        actor = self.ctx.actor
        if str(comment.author_id) != str(actor.id) and not actor.is_admin:
            raise OwnershipRequiredException("comment")

        kind = EntityKind(comment.entity_type)
        entity_id = comment.entity_id
        try:
            comment.deleted_at = utcnow()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to delete comment %s: %s", comment_id, exc)
            raise DatabaseException("Failed to delete comment")

        logger.info(
            "Comment %s soft-deleted by %s",
            comment_id,
            actor.id,
            extra={"comment_id": comment_id},
        )
        await self.ctx.invalidator.invalidate([comment_list_scope(kind, entity_id)])

    # ----------------------------------------------------------------- list
    async def list_comments(
        self, entity_type: Optional[str], entity_id: Optional[str]
    ) -> CommentList:
        target = parse_target(entity_type, entity_id)

        def query() -> dict:
            comments = (
                self.db.query(Comment)
                .filter(
                    Comment.entity_type == target.kind.value,
                    getattr(Comment, target.column) == target.key,
                    Comment.deleted_at.is_(None),
                )
                .order_by(Comment.created_at.asc(), Comment.id.asc())
                .all()
            )
            listing = CommentList(
                comments=[_comment_out(comment) for comment in comments],
                total_count=len(comments),
            )
            return listing.model_dump(by_alias=True, mode="json")

        data = await cached_query(comment_list_key(target.kind, target.entity_id), query)
        return CommentList.model_validate(data)


__all__ = [
    "CommentService",
    "CommentTarget",
    "ValidatedComment",
    "parse_target",
    "validate_comment_request",
]
