"""Email delivery for comment notifications."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from html import escape
from typing import Optional

from fastapi_mail import FastMail, MessageSchema, MessageType

from gallery_notifications.core.config import Settings, get_mail_client, settings

from .common import logger
from .schemas import CommentEmailProps

COMMENT_PREVIEW_LENGTH = 200


@dataclass
class DispatchResult:
    ok: bool
    skipped: bool = False
    error: Optional[str] = None


def comment_email_subject(props: CommentEmailProps) -> str:
    if props.is_reply:
        return f"{props.commenter_name} replied to your comment"
    if props.addresses_owner:
        return f"{props.commenter_name} commented on your {props.entity_type}"
    return f'{props.commenter_name} commented on the {props.entity_type} "{props.entity_title}"'


def _preview(text: str) -> str:
    if len(text) <= COMMENT_PREVIEW_LENGTH:
        return text
    return f"{text[:COMMENT_PREVIEW_LENGTH]}..."


def render_comment_notification(props: CommentEmailProps) -> str:
    """Render the HTML body. Every interpolated value is escaped."""
    commenter = escape(props.commenter_name)
    if props.commenter_profile_link:
        commenter = (
            f'<a href="{escape(props.commenter_profile_link, quote=True)}">{commenter}</a>'
        )

    if props.is_reply:
        headline = f"{commenter} replied to your comment on {escape(props.entity_title)}"
    elif props.addresses_owner:
        headline = f"{commenter} commented on your {escape(props.entity_type)} {escape(props.entity_title)}"
    else:
        headline = f"{commenter} commented on the {escape(props.entity_type)} {escape(props.entity_title)}"

    thumbnail = ""
    if props.entity_thumbnail:
        thumbnail = (
            f'<p><img src="{escape(props.entity_thumbnail, quote=True)}" '
            f'alt="{escape(props.entity_title, quote=True)}" width="320"></p>'
        )

    action = ""
    if props.entity_link:
        action = (
            f'<p><a href="{escape(props.entity_link, quote=True)}">'
            f"View the conversation</a></p>"
        )

    footer = ""
    if props.opt_out_link:
        footer = (
            '<p style="font-size:12px;color:#777">'
            f'<a href="{escape(props.opt_out_link, quote=True)}">'
            "Unsubscribe from comment notifications</a></p>"
        )

    return (
        "<html><body>"
        f"<p>Hi {escape(props.owner_name)},</p>"
        f"<p>{headline}</p>"
        f"{thumbnail}"
        f"<blockquote>{escape(_preview(props.comment_text))}</blockquote>"
        f"{action}"
        f"{footer}"
        "</body></html>"
    )


class EmailDispatcher:
    """Send one rendered notification email per call.

    `send` never raises; transport failures come back as `DispatchResult(ok=False)`.
    When disabled (tests, missing credentials) it logs and reports a skip.
    """

    def __init__(
        self,
        mail_client: FastMail,
        *,
        enabled: bool = True,
        reply_to: Optional[str] = None,
    ):
        self.mail_client = mail_client
        self.enabled = enabled
        self.reply_to = reply_to

    async def send(self, recipient_email: str, props: CommentEmailProps) -> DispatchResult:
        if not recipient_email:
            return DispatchResult(ok=False, error="missing recipient email")
        if not self.enabled:
            logger.info("Email sending disabled; skipping comment notification.")
            return DispatchResult(ok=True, skipped=True)

        try:
            message = MessageSchema(
                subject=comment_email_subject(props),
                recipients=[recipient_email],
                body=render_comment_notification(props),
                subtype=MessageType.html,
                reply_to=[self.reply_to] if self.reply_to else [],
            )
            await self.mail_client.send_message(message)
        except Exception as exc:
            logger.error("Failed to send comment notification email: %s", exc)
            return DispatchResult(ok=False, error=str(exc))
        return DispatchResult(ok=True)


def build_email_dispatcher(config: Settings) -> EmailDispatcher:
    return EmailDispatcher(
        get_mail_client(),
        enabled=config.mail_enabled,
        reply_to=config.email_reply_to_address,
    )


@lru_cache
def get_email_dispatcher() -> EmailDispatcher:
    return build_email_dispatcher(settings)


__all__ = [
    "COMMENT_PREVIEW_LENGTH",
    "DispatchResult",
    "EmailDispatcher",
    "comment_email_subject",
    "render_comment_notification",
    "build_email_dispatcher",
    "get_email_dispatcher",
]
