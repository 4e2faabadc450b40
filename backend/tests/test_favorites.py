"""Tests for the favorite relation: toggle, membership, listing and counts."""
from app.models.event import EventStatus
from app.models.favorite import Favorite
from app.security import Identity
from app.services import favorite_service
from tests.conftest import (
    auth_headers, create_event, register_admin, register_user, seed_event, seed_user,
)


def _toggle(client, user, event_id):
    return client.post(f"/api/events/{event_id}/favorite", headers=auth_headers(user))


class TestToggleFavorite:

    def test_toggle_twice_restores_state(self, client, session_factory):
        admin = register_admin(client, session_factory)
        fan = register_user(client, name="Fan")
        event = create_event(client, admin)

        first = _toggle(client, fan, event["event_id"])
        assert first.status_code == 200
        assert first.json() == {"success": True, "message": "Event added to favorites", "is_favorited": True}

        detail = client.get(f"/api/events/{event['event_id']}", headers=auth_headers(fan)).json()["data"]
        assert detail["is_favorited"] is True
        assert detail["favorites_count"] == 1

        second = _toggle(client, fan, event["event_id"])
        assert second.json()["is_favorited"] is False
        assert second.json()["message"] == "Event removed from favorites"

        detail = client.get(f"/api/events/{event['event_id']}", headers=auth_headers(fan)).json()["data"]
        assert detail["is_favorited"] is False
        assert detail["favorites_count"] == 0

    def test_anonymous_detail_is_never_favorited(self, client, session_factory):
        admin = register_admin(client, session_factory)
        event = create_event(client, admin)
        _toggle(client, admin, event["event_id"])
        assert client.get(f"/api/events/{event['event_id']}").json()["data"]["is_favorited"] is False

    def test_missing_event(self, client):
        fan = register_user(client, name="Fan")
        resp = _toggle(client, fan, "no-such-event")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Event not found"

    def test_hidden_event_cannot_be_favorited_by_stranger(self, client):
        owner = register_user(client, name="Owner")
        stranger = register_user(client, name="Stranger")
        event = create_event(client, owner)

        assert _toggle(client, stranger, event["event_id"]).status_code == 404
        assert _toggle(client, owner, event["event_id"]).json()["is_favorited"] is True

    def test_requires_login(self, client, session_factory):
        admin = register_admin(client, session_factory)
        event = create_event(client, admin)
        assert client.post(f"/api/events/{event['event_id']}/favorite").status_code == 401

    def test_count_tracks_several_users(self, client, session_factory):
        admin = register_admin(client, session_factory)
        fans = [register_user(client, name=f"Fan {i}") for i in range(3)]
        event = create_event(client, admin)
        for fan in fans:
            _toggle(client, fan, event["event_id"])
        _toggle(client, fans[0], event["event_id"])

        detail = client.get(f"/api/events/{event['event_id']}").json()["data"]
        assert detail["favorites_count"] == 2

    def test_sort_by_favorites_count(self, client, session_factory):
        admin = register_admin(client, session_factory)
        fan_a = register_user(client, name="Fan A")
        fan_b = register_user(client, name="Fan B")
        loved = create_event(client, admin, title="Loved")
        liked = create_event(client, admin, title="Liked")
        create_event(client, admin, title="Ignored")

        _toggle(client, fan_a, loved["event_id"])
        _toggle(client, fan_b, loved["event_id"])
        _toggle(client, fan_a, liked["event_id"])

        data = client.get("/api/events/?sort=favoritesCount&order=desc").json()["data"]
        assert [e["title"] for e in data] == ["Loved", "Liked", "Ignored"]


class TestListFavorites:

    def test_lists_only_favorited_events(self, client, session_factory):
        admin = register_admin(client, session_factory)
        fan = register_user(client, name="Fan")
        keep = [create_event(client, admin, title=f"Keep {i}") for i in range(2)]
        create_event(client, admin, title="Skip")
        for event in keep:
            _toggle(client, fan, event["event_id"])

        body = client.get("/api/events/favorites", headers=auth_headers(fan)).json()
        assert body["count"] == 2
        assert {e["event_id"] for e in body["data"]} == {e["event_id"] for e in keep}

    def test_no_favorites_is_empty(self, client):
        fan = register_user(client, name="Fan")
        body = client.get("/api/events/favorites", headers=auth_headers(fan)).json()
        assert body == {"success": True, "count": 0, "data": []}

    def test_deleting_event_removes_its_favorites(self, client, session_factory):
        admin = register_admin(client, session_factory)
        fan = register_user(client, name="Fan")
        event = create_event(client, admin)
        _toggle(client, fan, event["event_id"])

        client.delete(f"/api/events/{event['event_id']}", headers=auth_headers(admin))
        body = client.get("/api/events/favorites", headers=auth_headers(fan)).json()
        assert body["count"] == 0


class TestFavoriteService:

    def test_is_favorited_is_false_for_unknown_pairs(self, db):
        assert favorite_service.is_favorited(db, "nobody", "nothing") is False

    def test_toggle_round_trip(self, db):
        owner = seed_user(db)
        fan = seed_user(db, name="Fan")
        event = seed_event(db, owner)
        identity = Identity(fan.user_id)

        assert favorite_service.toggle_favorite(db, identity, event.event_id) is True
        assert favorite_service.is_favorited(db, fan.user_id, event.event_id) is True
        assert favorite_service.toggle_favorite(db, identity, event.event_id) is False
        assert favorite_service.is_favorited(db, fan.user_id, event.event_id) is False
        assert db.query(Favorite).count() == 0

        db.refresh(event)
        assert event.favorites_count == 0

    def test_list_favorites_keeps_events_that_left_approval(self, db):
        owner = seed_user(db)
        event = seed_event(db, owner)
        favorite_service.toggle_favorite(db, Identity(owner.user_id), event.event_id)
        event.status = EventStatus.cancelled
        db.commit()

        assert [e.event_id for e in favorite_service.list_favorites(db, owner.user_id)] == [event.event_id]
