"""REST API tests against an in-memory UoW (dependency override)."""
from __future__ import annotations

import uuid

from realtime_chat.config import settings
from realtime_chat.infrastructure.ratelimit.redis_limiter import RedisRateLimiter
from tests.conftest import FakeRedis, auth, make_message, make_token, minutes_ago


def test_healthz(client):
    resp = client.get("/healthz")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "connections": 0, "online": 0}


def test_requires_token(client):
    resp = client.get("/api/messages/users")

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Unauthorized - No Token Provided"


def test_rejects_bad_token(client):
    resp = client.get("/api/messages/users", headers={"Authorization": "Bearer garbage"})

    assert resp.status_code == 401


def test_accepts_cookie_token(client, alice, bob):
    resp = client.get(
        "/api/messages/users",
        headers={"Cookie": f"{settings.JWT_COOKIE_NAME}={make_token(alice.id, 'userId')}"},
    )

    assert resp.status_code == 200
    assert [u["id"] for u in resp.json()] == [str(bob.id)]


def test_list_contacts_shape(client, alice, bob):
    resp = client.get("/api/messages/users", headers=auth(bob.id))

    assert resp.status_code == 200
    assert resp.json() == [{
        "id": str(alice.id),
        "fullName": alice.full_name,
        "profilePicUrl": alice.profile_pic,
        "lastSeenAt": None,
    }]


def test_send_message(client, uow, alice, bob):
    resp = client.post(
        f"/api/messages/send/{bob.id}",
        json={"text": "hello bob"},
        headers=auth(alice.id),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["text"] == "hello bob"
    assert data["senderId"] == str(alice.id)
    assert data["receiverId"] == str(bob.id)
    assert data["read"] is False
    assert data["imageUrl"] is None
    assert len(uow.messages._messages) == 1


def test_send_empty_message_rejected(client, uow, alice, bob):
    resp = client.post(f"/api/messages/send/{bob.id}", json={}, headers=auth(alice.id))

    assert resp.status_code == 422
    assert resp.json()["detail"] == "Please enter a message, image, or video."
    assert uow.messages._messages == []


def test_send_too_long_rejected(client, alice, bob):
    resp = client.post(
        f"/api/messages/send/{bob.id}",
        json={"text": "x" * (settings.MESSAGE_TEXT_MAX_LENGTH + 1)},
        headers=auth(alice.id),
    )

    assert resp.status_code == 422


def test_send_bad_media_url_rejected(client, uow, alice, bob):
    resp = client.post(
        f"/api/messages/send/{bob.id}",
        json={"image": "data:image/png;base64,AAAA"},
        headers=auth(alice.id),
    )

    assert resp.status_code == 422
    assert "data URIs are not accepted" in resp.json()["detail"]
    assert uow.messages._messages == []


def test_send_to_unknown_user(client, alice):
    resp = client.post(
        f"/api/messages/send/{uuid.uuid4()}",
        json={"text": "anyone?"},
        headers=auth(alice.id),
    )

    assert resp.status_code == 404


def test_history_is_ordered(client, uow, alice, bob):
    newer = make_message(sender_id=bob.id, receiver_id=alice.id, created_at=minutes_ago(1))
    older = make_message(sender_id=alice.id, receiver_id=bob.id, created_at=minutes_ago(5))
    uow.messages._messages.extend([newer, older])

    resp = client.get(f"/api/messages/{bob.id}", headers=auth(alice.id))

    assert resp.status_code == 200
    assert [m["id"] for m in resp.json()] == [str(older.id), str(newer.id)]


def test_history_unknown_user(client, alice):
    resp = client.get(f"/api/messages/{uuid.uuid4()}", headers=auth(alice.id))

    assert resp.status_code == 404


def test_unread_counts_and_mark_read(client, uow, alice, bob):
    uow.messages._messages.extend([
        make_message(sender_id=bob.id, receiver_id=alice.id),
        make_message(sender_id=bob.id, receiver_id=alice.id),
    ])

    resp = client.get("/api/messages/unread-counts", headers=auth(alice.id))
    assert resp.json() == {str(bob.id): 2}

    resp = client.post(f"/api/messages/read/{bob.id}", headers=auth(alice.id))
    assert resp.status_code == 200
    assert resp.json() == {"updated": 2}

    resp = client.get("/api/messages/unread-counts", headers=auth(alice.id))
    assert resp.json() == {}


def test_rate_limit(app, client):
    app.state.rate_limiter = RedisRateLimiter(FakeRedis(), limit=2, window_seconds=900)

    codes = [client.get("/healthz").status_code for _ in range(3)]

    assert codes == [200, 200, 429]
    assert client.get("/healthz").json()["detail"] == "Too many requests. Please try again later."
