"""Request and response schemas for comments.

Create fields are optional at the schema level; the service validates them so
every malformed request gets the same 400 envelope.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from gallery_notifications.modules.notifications.schemas import CamelModel


class CommentCreate(CamelModel):
    entity_type: Optional[str] = None
    entity_id: Optional[Union[int, str]] = None
    comment_text: Optional[str] = None
    parent_comment_id: Optional[str] = None


class CommentCreated(CamelModel):
    success: bool = True
    comment_id: str


class CommentAuthor(CamelModel):
    id: str
    full_name: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None


class CommentOut(CamelModel):
    id: str
    entity_type: str
    entity_id: str
    comment_text: str
    parent_comment_id: Optional[str] = None
    created_at: datetime
    author: Optional[CommentAuthor] = None


class CommentList(CamelModel):
    comments: List[CommentOut]
    total_count: int


__all__ = [
    "CommentCreate",
    "CommentCreated",
    "CommentAuthor",
    "CommentOut",
    "CommentList",
]
