"""Comment endpoints: create (with notification fan-out), soft delete and listing."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from gallery_notifications.api.deps import get_request_context
from gallery_notifications.core.config import settings
from gallery_notifications.core.context import RequestContext
from gallery_notifications.core.middleware.rate_limit import limiter
from gallery_notifications.modules.comments.schemas import (
    CommentCreate,
    CommentCreated,
    CommentList,
)
from gallery_notifications.modules.comments.service import CommentService

router = APIRouter(prefix="/comments", tags=["Comments"])


def get_comment_service(ctx: RequestContext = Depends(get_request_context)) -> CommentService:
    """Provide a CommentService bound to the request context."""
    return CommentService(ctx)


@router.post("", status_code=status.HTTP_200_OK, response_model=CommentCreated)
@limiter.limit(settings.COMMENT_RATE_LIMIT)
async def create_comment(
    request: Request,
    payload: CommentCreate,
    service: CommentService = Depends(get_comment_service),
):
    """
    Create a comment on a photo, album, event or challenge.

    Returns `{success, commentId}` once the comment is stored. Notifications to the
    owner, admins or replied-to author are best-effort and never change the response.
    """
    return await service.create_comment(payload)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    service: CommentService = Depends(get_comment_service),
):
    """Soft-delete a comment. Only its author or an admin may do this."""
    await service.delete_comment(comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=CommentList)
async def list_comments(
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    service: CommentService = Depends(get_comment_service),
):
    """List visible comments on one entity, oldest first."""
    return await service.list_comments(entity_type, entity_id)
