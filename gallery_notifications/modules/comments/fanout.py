"""Notification fan-out for one persisted comment.

In-app rows and emails travel independent paths run side by side. In-app rows go
to every recipient; emails go only to recipients the preference gate lets
through, sent with bounded concurrency. A failure for one recipient never stops
delivery to the next.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Set

from gallery_notifications.core.context import RequestContext
from gallery_notifications.modules.notifications.common import NOTIFICATIONS_EMAIL_TYPE
from gallery_notifications.modules.notifications.models import NotificationType
from gallery_notifications.modules.notifications.preferences import PreferenceGate
from gallery_notifications.modules.notifications.schemas import (
    CommentEmailProps,
    NotificationData,
)
from gallery_notifications.modules.notifications.service import InAppNotificationWriter
from gallery_notifications.modules.users.service import Identity

from .common import logger
from .entities import ResolvedEntity
from .models import Comment
from .recipients import RecipientSet


@dataclass
class Delivery:
    recipient: Identity
    notification_type: NotificationType
    is_reply: bool = False


@dataclass
class FanoutReport:
    notifications_written: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    emails_skipped: int = 0


def plan_deliveries(recipients: RecipientSet, entity: ResolvedEntity) -> List[Delivery]:
    """One delivery per person; the reply target always gets `comment_reply`."""
    deliveries: List[Delivery] = []
    if recipients.reply_target is not None:
        deliveries.append(
            Delivery(recipients.reply_target, NotificationType.COMMENT_REPLY, is_reply=True)
        )
    for person in recipients.primary:
        deliveries.append(Delivery(person, entity.kind.notification_type))
    return deliveries


class NotificationFanout:
    def __init__(self, ctx: RequestContext):
        self.ctx = ctx
        self.commenter = Identity.from_profile(ctx.actor)
        self.writer = InAppNotificationWriter(ctx.db)
        self.gate = PreferenceGate(ctx.db)

    async def dispatch(
        self, comment: Comment, entity: ResolvedEntity, recipients: RecipientSet
    ) -> FanoutReport:
        report = FanoutReport()
        deliveries = plan_deliveries(recipients, entity)
        if not deliveries:
            return report

        results = await asyncio.gather(
            self._write_in_app(comment, entity, deliveries, report),
            self._send_emails(comment, entity, deliveries, report),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "Notification path failed for comment %s: %s",
                    comment.id,
                    result,
                    extra={"comment_id": comment.id},
                )

        logger.info(
            "Comment %s fan-out: %s in-app, %s emailed, %s failed, %s skipped",
            comment.id,
            report.notifications_written,
            report.emails_sent,
            report.emails_failed,
            report.emails_skipped,
            extra={"comment_id": comment.id, "entity_type": entity.kind.value},
        )
        return report

    # ---------------------------------------------------------------- in-app
    async def _write_in_app(
        self,
        comment: Comment,
        entity: ResolvedEntity,
        deliveries: List[Delivery],
        report: FanoutReport,
    ) -> None:
        data = NotificationData(
            title=entity.title,
            thumbnail=entity.thumbnail,
            link=entity.link,
            actor_name=self.commenter.display_name("Someone"),
            actor_nickname=self.commenter.nickname,
            actor_avatar=self.commenter.avatar_url,
        )
        for delivery in deliveries:
            written = await self.writer.write(
                recipient_id=delivery.recipient.id,
                actor_id=self.commenter.id,
                notification_type=delivery.notification_type,
                entity_type=entity.kind.value,
                entity_id=entity.entity_id,
                data=data,
            )
            if written is not None:
                report.notifications_written += 1

    # ----------------------------------------------------------------- email
    async def _send_emails(
        self,
        comment: Comment,
        entity: ResolvedEntity,
        deliveries: List[Delivery],
        report: FanoutReport,
    ) -> None:
        reachable = [d for d in deliveries if d.recipient.email]
        report.emails_skipped += len(deliveries) - len(reachable)
        eligible: Set[str] = self.gate.filter_eligible(
            [d.recipient.id for d in reachable], NOTIFICATIONS_EMAIL_TYPE
        )
        to_send = [d for d in reachable if d.recipient.id in eligible]
        report.emails_skipped += len(reachable) - len(to_send)
        if not to_send:
            return

        semaphore = asyncio.Semaphore(self.ctx.fanout_concurrency)

        async def send_one(delivery: Delivery) -> None:
            async with semaphore:
                props = self._email_props(comment, entity, delivery)
                try:
                    result = await self.ctx.dispatcher.send(delivery.recipient.email, props)
                except Exception as exc:
                    logger.error(
                        "Email dispatch raised for %s: %s",
                        delivery.recipient.id,
                        exc,
                        extra={"recipient_id": delivery.recipient.id},
                    )
                    report.emails_failed += 1
                    return
                if result.ok:
                    report.emails_sent += 1
                else:
                    report.emails_failed += 1
                    logger.warning(
                        "Email to %s not delivered: %s",
                        delivery.recipient.id,
                        result.error,
                        extra={"recipient_id": delivery.recipient.id},
                    )

        await asyncio.gather(*(send_one(d) for d in to_send))

    def _email_props(
        self, comment: Comment, entity: ResolvedEntity, delivery: Delivery
    ) -> CommentEmailProps:
        return CommentEmailProps(
            owner_name=delivery.recipient.display_name("Friend"),
            commenter_name=self.commenter.display_name("Someone"),
            commenter_nickname=self.commenter.nickname,
            commenter_avatar_url=self.commenter.avatar_url,
            commenter_profile_link=self.commenter.profile_link(self.ctx.site_url),
            comment_text=comment.comment_text,
            entity_type=entity.kind.value,
            entity_title=entity.title,
            entity_link=entity.link,
            entity_thumbnail=entity.thumbnail,
            is_reply=delivery.is_reply,
            addresses_owner=not entity.kind.notifies_admin_group,
            opt_out_link=self.ctx.minter.mint(delivery.recipient.id, NOTIFICATIONS_EMAIL_TYPE),
        )


__all__ = ["Delivery", "FanoutReport", "NotificationFanout", "plan_deliveries"]
