"""Entity resolution: titles, thumbnails, deep links and audiences per kind."""

import pytest

from gallery_notifications.modules.comments.entities import (
    UNTITLED_PHOTO,
    EntityKind,
    EntityResolver,
    parse_event_id,
)
from gallery_notifications.modules.notifications.models import NotificationType
from tests import factories
from tests.fakes import make_ctx

SITE = "https://photos.example.com"


@pytest.fixture
def resolver():
    return EntityResolver()


def test_entity_kind_parsing_and_types():
    assert EntityKind.parse(" Photo ") is EntityKind.PHOTO
    assert EntityKind.parse("video") is None
    assert EntityKind.parse(None) is None
    assert EntityKind.EVENT.notification_type is NotificationType.COMMENT_EVENT
    assert EntityKind.CHALLENGE.notifies_admin_group is True
    assert EntityKind.ALBUM.notifies_admin_group is False


def test_photo_inside_owner_album_links_through_album(session, resolver, owner, member):
    photo = factories.make_photo(session, owner, title="Harbour")
    album = factories.make_album(session, owner, slug="coast")
    factories.add_to_album(session, album, photo)

    entity = resolver.resolve(make_ctx(session, member), EntityKind.PHOTO, photo.id)

    assert entity.title == "Harbour"
    assert entity.thumbnail == photo.url
    assert entity.link == f"{SITE}/@olive/album/coast/photo/{photo.short_id}#comments"
    assert entity.owner.id == owner.id
    assert entity.admin_group == []


def test_photo_outside_albums_links_to_photo_page(session, resolver, owner, member):
    photo = factories.make_photo(session, owner)

    entity = resolver.resolve(make_ctx(session, member), EntityKind.PHOTO, photo.id)

    assert entity.link == f"{SITE}/@olive/photo/{photo.short_id}#comments"


def test_album_owned_by_someone_else_is_ignored_for_photo_link(session, resolver, owner, member):
    photo = factories.make_photo(session, owner)
    album = factories.make_album(session, member, slug="borrowed")
    factories.add_to_album(session, album, photo)

    entity = resolver.resolve(make_ctx(session, member), EntityKind.PHOTO, photo.id)

    assert entity.link == f"{SITE}/@olive/photo/{photo.short_id}#comments"


def test_untitled_photo_and_owner_without_nickname(session, resolver, member):
    anonymous = factories.make_profile(session, nickname=None)
    photo = factories.make_photo(session, anonymous, title=None)

    entity = resolver.resolve(make_ctx(session, member), EntityKind.PHOTO, photo.id)

    assert entity.title == UNTITLED_PHOTO
    assert entity.link == ""
    assert entity.owner.id == anonymous.id


def test_album_resolution(session, resolver, owner, member):
    album = factories.make_album(session, owner, title="Coast", slug="coast")

    entity = resolver.resolve(make_ctx(session, member), EntityKind.ALBUM, album.id)

    assert entity.title == "Coast"
    assert entity.thumbnail == album.cover_image_url
    assert entity.link == f"{SITE}/@olive/album/coast#comments"
    assert entity.owner.nickname == "olive"


def test_system_album_has_no_owner(session, resolver, member):
    album = factories.make_album(session, None, title="Staff picks")

    entity = resolver.resolve(make_ctx(session, member), EntityKind.ALBUM, album.id)

    assert entity.owner is None
    assert entity.link == ""


def test_event_audience_is_active_admins_minus_actor(session, resolver):
    admin_a = factories.make_profile(session, is_admin=True)
    admin_b = factories.make_profile(session, is_admin=True)
    factories.make_profile(session, is_admin=True, suspended=True)
    factories.make_profile(session)
    event = factories.make_event(session, title="Photo Walk", slug="photo-walk")

    entity = resolver.resolve(make_ctx(session, admin_a), EntityKind.EVENT, str(event.id))

    assert entity.entity_id == str(event.id)
    assert entity.link == f"{SITE}/events/photo-walk#comments"
    assert entity.thumbnail == event.cover_image
    assert entity.owner is None
    assert [person.id for person in entity.admin_group] == [admin_b.id]


def test_event_with_non_numeric_id_is_unresolved(session, resolver, member):
    assert resolver.resolve(make_ctx(session, member), EntityKind.EVENT, "walk") is None


def test_challenge_resolution(session, resolver, member):
    admin = factories.make_profile(session, is_admin=True)
    challenge = factories.make_challenge(session, title="Golden Hour", slug="golden-hour")

    entity = resolver.resolve(make_ctx(session, member), EntityKind.CHALLENGE, challenge.id)

    assert entity.title == "Golden Hour"
    assert entity.link == f"{SITE}/challenges/golden-hour#comments"
    assert [person.id for person in entity.admin_group] == [admin.id]


@pytest.mark.parametrize("kind", list(EntityKind))
def test_missing_entities_resolve_to_none(session, resolver, member, kind):
    missing = "999" if kind is EntityKind.EVENT else "missing-id"
    assert resolver.resolve(make_ctx(session, member), kind, missing) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        (" 007 ", 7),
        (12, 12),
        (str(2**63 - 1), 2**63 - 1),
        (str(2**63), None),
        ("9" * 30, None),
        ("²", None),
        ("٣", None),
        ("-3", None),
        ("4.0", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_event_id(raw, expected):
    assert parse_event_id(raw) == expected


def test_event_with_out_of_range_id_is_unresolved(session, resolver, member):
    ctx = make_ctx(session, member)
    assert resolver.resolve(ctx, EntityKind.EVENT, "9" * 30) is None
