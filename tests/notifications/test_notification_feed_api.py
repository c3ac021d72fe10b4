"""Notification feed endpoints: listing, seen flags and dismissal."""

from datetime import datetime, timedelta, timezone

from gallery_notifications.modules.notifications.models import Notification
from tests import factories
from tests.factories import auth_headers


def _notify(session, recipient, actor=None, *, minutes_ago=0, seen=False, dismissed=False, kind="comment_photo"):
    created = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
    row = Notification(
        user_id=recipient.id,
        actor_id=actor.id if actor else None,
        type=kind,
        entity_type="photo",
        entity_id="p1",
        data={"title": "Sunset", "link": "https://photos.example.com/@olive/photo/p1#comments"},
        created_at=created,
        seen_at=created if seen else None,
        dismissed_at=created if dismissed else None,
    )
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def test_feed_requires_sign_in(client):
    res = client.get("/api/notifications")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "authentication_failed"


def test_feed_is_newest_first_and_hides_dismissed(client, session, owner, member):
    older = _notify(session, owner, member, minutes_ago=10)
    newer = _notify(session, owner, member, minutes_ago=1, seen=True)
    _notify(session, owner, member, minutes_ago=5, dismissed=True)
    _notify(session, member, owner)

    res = client.get("/api/notifications", headers=auth_headers(owner))

    assert res.status_code == 200
    body = res.json()
    assert [n["id"] for n in body["notifications"]] == [newer.id, older.id]
    assert body["totalCount"] == 2
    assert body["unseenCount"] == 1
    assert body["hasMore"] is False
    first = body["notifications"][0]
    assert first["type"] == "comment_photo"
    assert first["data"]["title"] == "Sunset"
    assert first["actor"]["nickname"] == "casey"
    assert first["actor"]["fullName"] == "Casey Commenter"


def test_feed_pagination(client, session, owner):
    for minutes in range(5):
        _notify(session, owner, minutes_ago=minutes)

    res = client.get("/api/notifications?limit=2&offset=2", headers=auth_headers(owner))

    body = res.json()
    assert len(body["notifications"]) == 2
    assert body["totalCount"] == 5
    assert body["hasMore"] is True
    assert body["notifications"][0]["actor"] is None


def test_feed_limit_is_bounded(client, owner):
    res = client.get("/api/notifications?limit=500", headers=auth_headers(owner))
    assert res.status_code == 400
    assert res.json()["error"]["details"]["field"] == "limit"


def test_mark_one_seen(client, session, owner, member):
    row = _notify(session, owner, member)

    res = client.post(f"/api/notifications/{row.id}/seen", headers=auth_headers(owner))

    assert res.status_code == 200
    assert res.json()["seenAt"] is not None
    session.refresh(row)
    assert row.seen_at is not None


def test_cannot_touch_someone_elses_notification(client, session, owner, member):
    row = _notify(session, owner, member)

    res = client.post(f"/api/notifications/{row.id}/seen", headers=auth_headers(member))
    assert res.status_code == 404

    res = client.post(f"/api/notifications/{row.id}/dismiss", headers=auth_headers(member))
    assert res.status_code == 404


def test_mark_all_seen_counts_updates(client, session, owner):
    _notify(session, owner)
    _notify(session, owner)
    _notify(session, owner, seen=True)

    res = client.post("/api/notifications/seen-all", headers=auth_headers(owner))

    assert res.status_code == 200
    assert res.json() == {"updated": 2}
    feed = client.get("/api/notifications", headers=auth_headers(owner)).json()
    assert feed["unseenCount"] == 0


def test_dismiss_removes_from_feed(client, session, owner):
    row = _notify(session, owner)

    res = client.post(f"/api/notifications/{row.id}/dismiss", headers=auth_headers(owner))

    assert res.status_code == 204
    feed = client.get("/api/notifications", headers=auth_headers(owner)).json()
    assert feed["totalCount"] == 0
    again = client.post(f"/api/notifications/{row.id}/dismiss", headers=auth_headers(owner))
    assert again.status_code == 404


def test_suspended_member_is_forbidden(client, session):
    suspended = factories.make_profile(session, suspended=True)
    res = client.get("/api/notifications", headers=auth_headers(suspended))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "account_suspended"
