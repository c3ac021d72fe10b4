"""Fan-out planning and delivery accounting."""

import pytest

from gallery_notifications.modules.comments.entities import EntityKind, EntityResolver
from gallery_notifications.modules.comments.fanout import NotificationFanout, plan_deliveries
from gallery_notifications.modules.comments.recipients import RecipientSet, build_recipients
from gallery_notifications.modules.notifications.models import NotificationType
from gallery_notifications.modules.users.service import Identity
from tests import factories
from tests.fakes import RecordingDispatcher, make_ctx, make_minter


def test_reply_target_is_planned_first_with_reply_type():
    reply = Identity(id="r")
    admin = Identity(id="a")
    recipients = RecipientSet(primary=[admin], reply_target=reply)

    class Entity:
        kind = EntityKind.CHALLENGE

    deliveries = plan_deliveries(recipients, Entity())

    assert [(d.recipient.id, d.notification_type, d.is_reply) for d in deliveries] == [
        ("r", NotificationType.COMMENT_REPLY, True),
        ("a", NotificationType.COMMENT_CHALLENGE, False),
    ]


@pytest.mark.asyncio
async def test_report_counts_each_outcome(session, email_types, member):
    opted_out = factories.make_profile(session, is_admin=True)
    no_email = factories.make_profile(session, is_admin=True, email=None)
    failing = factories.make_profile(session, is_admin=True)
    ok = factories.make_profile(session, is_admin=True)
    factories.opt_out(session, opted_out, email_types.notifications)
    event = factories.make_event(session)
    comment = factories.make_comment(session, member, entity_type="event", entity_id=event.id)
    ctx = make_ctx(session, member, dispatcher=RecordingDispatcher(failing={failing.email}))
    entity = EntityResolver().resolve(ctx, EntityKind.EVENT, str(event.id))

    report = await NotificationFanout(ctx).dispatch(
        comment, entity, build_recipients(ctx, comment, entity)
    )

    assert report.notifications_written == 4
    assert report.emails_sent == 1
    assert report.emails_failed == 1
    assert report.emails_skipped == 2
    assert ctx.dispatcher.recipients == [ok.email]


@pytest.mark.asyncio
async def test_emails_go_out_without_opt_out_link_when_minting_is_unavailable(session, email_types, owner, member):
    photo = factories.make_photo(session, owner)
    comment = factories.make_comment(session, member, entity_type="photo", entity_id=photo.id)
    ctx = make_ctx(session, member, minter=make_minter(key_hex=""))
    entity = EntityResolver().resolve(ctx, EntityKind.PHOTO, photo.id)

    await NotificationFanout(ctx).dispatch(comment, entity, build_recipients(ctx, comment, entity))

    props = ctx.dispatcher.props_for(owner.email)
    assert props is not None
    assert props.opt_out_link is None


@pytest.mark.asyncio
async def test_empty_recipient_set_does_nothing(session, member, owner):
    photo = factories.make_photo(session, owner)
    comment = factories.make_comment(session, member, entity_type="photo", entity_id=photo.id)
    ctx = make_ctx(session, member)
    entity = EntityResolver().resolve(ctx, EntityKind.PHOTO, photo.id)

    report = await NotificationFanout(ctx).dispatch(comment, entity, RecipientSet())

    assert report.notifications_written == 0
    assert ctx.dispatcher.sent == []
