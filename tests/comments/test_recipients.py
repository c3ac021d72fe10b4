"""Recipient selection for owners, admin groups and replies."""

from gallery_notifications.modules.comments.entities import EntityKind, EntityResolver
from gallery_notifications.modules.comments.recipients import build_recipients
from tests import factories
from tests.fakes import make_ctx


def _recipients(session, actor, comment, kind, entity_id):
    ctx = make_ctx(session, actor)
    entity = EntityResolver().resolve(ctx, kind, entity_id)
    return build_recipients(ctx, comment, entity)


def test_photo_comment_notifies_owner(session, owner, member):
    photo = factories.make_photo(session, owner)
    comment = factories.make_comment(session, member, entity_type="photo", entity_id=photo.id)

    recipients = _recipients(session, member, comment, EntityKind.PHOTO, photo.id)

    assert [p.id for p in recipients.primary] == [owner.id]
    assert recipients.reply_target is None


def test_owner_commenting_on_own_photo_notifies_nobody(session, owner):
    photo = factories.make_photo(session, owner)
    comment = factories.make_comment(session, owner, entity_type="photo", entity_id=photo.id)

    recipients = _recipients(session, owner, comment, EntityKind.PHOTO, photo.id)

    assert not recipients
    assert recipients.everyone == []


def test_reply_on_photo_notifies_only_parent_author(session, owner, member):
    third = factories.make_profile(session)
    photo = factories.make_photo(session, owner)
    parent = factories.make_comment(session, third, entity_type="photo", entity_id=photo.id)
    reply = factories.make_comment(
        session, member, entity_type="photo", entity_id=photo.id, parent=parent
    )

    recipients = _recipients(session, member, reply, EntityKind.PHOTO, photo.id)

    assert recipients.primary == []
    assert recipients.reply_target.id == third.id
    assert [p.id for p in recipients.everyone] == [third.id]


def test_owner_replying_to_commenter_notifies_commenter(session, owner, member):
    photo = factories.make_photo(session, owner)
    parent = factories.make_comment(session, member, entity_type="photo", entity_id=photo.id)
    reply = factories.make_comment(
        session, owner, entity_type="photo", entity_id=photo.id, parent=parent
    )

    recipients = _recipients(session, owner, reply, EntityKind.PHOTO, photo.id)

    assert recipients.primary == []
    assert recipients.reply_target.id == member.id


def test_reply_to_own_comment_falls_back_to_owner(session, owner, member):
    album = factories.make_album(session, owner)
    parent = factories.make_comment(session, member, entity_type="album", entity_id=album.id)
    reply = factories.make_comment(
        session, member, entity_type="album", entity_id=album.id, parent=parent
    )

    recipients = _recipients(session, member, reply, EntityKind.ALBUM, album.id)

    assert recipients.reply_target is None
    assert [p.id for p in recipients.primary] == [owner.id]


def test_system_album_comment_has_no_recipients(session, member):
    album = factories.make_album(session, None)
    comment = factories.make_comment(session, member, entity_type="album", entity_id=album.id)

    assert not _recipients(session, member, comment, EntityKind.ALBUM, album.id)


def test_event_reply_notifies_admins_and_parent_author_once(session, member):
    admin_e = factories.make_profile(session, is_admin=True)
    admin_f = factories.make_profile(session, is_admin=True)
    event = factories.make_event(session)
    parent = factories.make_comment(session, admin_e, entity_type="event", entity_id=event.id)
    reply = factories.make_comment(
        session, member, entity_type="event", entity_id=event.id, parent=parent
    )

    recipients = _recipients(session, member, reply, EntityKind.EVENT, str(event.id))

    assert recipients.reply_target.id == admin_e.id
    assert [p.id for p in recipients.primary] == [admin_f.id]
    assert {p.id for p in recipients.everyone} == {admin_e.id, admin_f.id}


def test_admin_commenting_on_challenge_is_excluded(session):
    admin_a = factories.make_profile(session, is_admin=True)
    admin_b = factories.make_profile(session, is_admin=True)
    challenge = factories.make_challenge(session)
    comment = factories.make_comment(
        session, admin_a, entity_type="challenge", entity_id=challenge.id
    )

    recipients = _recipients(session, admin_a, comment, EntityKind.CHALLENGE, challenge.id)

    assert [p.id for p in recipients.primary] == [admin_b.id]


def test_suspended_album_owner_is_not_a_recipient(session, member):
    suspended = factories.make_profile(session, suspended=True)
    album = factories.make_album(session, suspended)
    comment = factories.make_comment(session, member, entity_type="album", entity_id=album.id)

    recipients = _recipients(session, member, comment, EntityKind.ALBUM, album.id)

    assert not recipients


def test_reply_to_suspended_author_is_routed_to_owner(session, owner, member):
    suspended = factories.make_profile(session, suspended=True)
    photo = factories.make_photo(session, owner)
    parent = factories.make_comment(session, suspended, entity_type="photo", entity_id=photo.id)
    reply = factories.make_comment(
        session, member, entity_type="photo", entity_id=photo.id, parent=parent
    )

    recipients = _recipients(session, member, reply, EntityKind.PHOTO, photo.id)

    assert recipients.reply_target is None
    assert [p.id for p in recipients.primary] == [owner.id]


def test_event_reply_to_suspended_author_reaches_admins_only(session, member):
    admin = factories.make_profile(session, is_admin=True)
    suspended = factories.make_profile(session, suspended=True)
    event = factories.make_event(session)
    parent = factories.make_comment(session, suspended, entity_type="event", entity_id=event.id)
    reply = factories.make_comment(
        session, member, entity_type="event", entity_id=event.id, parent=parent
    )

    recipients = _recipients(session, member, reply, EntityKind.EVENT, str(event.id))

    assert recipients.reply_target is None
    assert [p.id for p in recipients.primary] == [admin.id]
