"""Pydantic schemas for notifications, email payloads and email preferences.

Wire names are camelCase to match the web client; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class NotificationData(CamelModel):
    """Display payload stored on each in-app notification."""

    title: str
    thumbnail: Optional[str] = None
    link: str = ""
    actor_name: str
    actor_nickname: Optional[str] = None
    actor_avatar: Optional[str] = None


class CommentEmailProps(CamelModel):
    """Everything the comment email template renders."""

    owner_name: str
    commenter_name: str
    commenter_nickname: Optional[str] = None
    commenter_avatar_url: Optional[str] = None
    commenter_profile_link: Optional[str] = None
    comment_text: str
    entity_type: str
    entity_title: str
    entity_link: str = ""
    entity_thumbnail: Optional[str] = None
    is_reply: bool = False
    addresses_owner: bool = True
    opt_out_link: Optional[str] = None


class NotificationActor(CamelModel):
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    full_name: Optional[str] = None


class NotificationOut(CamelModel):
    id: str
    type: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    data: dict = Field(default_factory=dict)
    created_at: datetime
    seen_at: Optional[datetime] = None
    actor: Optional[NotificationActor] = None


class NotificationFeed(CamelModel):
    notifications: List[NotificationOut]
    unseen_count: int
    total_count: int
    has_more: bool


class SeenAllResult(CamelModel):
    updated: int


class UnsubscribeRequest(CamelModel):
    token: Optional[str] = None


class UnsubscribeResult(CamelModel):
    success: bool = True
    message: str
    email_type: str
    already_unsubscribed: bool = False


class EmailPreferenceOut(CamelModel):
    type_key: str
    type_label: str
    description: Optional[str] = None
    opted_out: bool = False


class EmailPreferenceUpdate(CamelModel):
    opted_out: bool


__all__ = [
    "CamelModel",
    "NotificationData",
    "CommentEmailProps",
    "NotificationActor",
    "NotificationOut",
    "NotificationFeed",
    "SeenAllResult",
    "UnsubscribeRequest",
    "UnsubscribeResult",
    "EmailPreferenceOut",
    "EmailPreferenceUpdate",
]
