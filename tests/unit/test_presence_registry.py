from __future__ import annotations

import uuid

from realtime_chat.infrastructure.ws.presence import PresenceRegistry


def test_register_and_lookup():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()

    registry.register(user_id, "c1")

    assert registry.lookup(user_id) == "c1"
    assert registry.is_online(user_id)
    assert registry.list_online() == [user_id]
    assert len(registry) == 1


def test_lookup_offline_user():
    registry = PresenceRegistry()

    assert registry.lookup(uuid.uuid4()) is None
    assert registry.list_online() == []


def test_reconnect_last_registration_wins():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()

    first = registry.register(user_id, "c1")
    second = registry.register(user_id, "c2")

    assert second.generation > first.generation
    assert registry.lookup(user_id) == "c2"
    assert registry.list_online() == [user_id]


def test_superseded_unregister_keeps_new_connection():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()

    old = registry.register(user_id, "c1")
    registry.register(user_id, "c2")

    assert registry.unregister(old) is False
    assert registry.lookup(user_id) == "c2"


def test_unregister_current_lease():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()

    lease = registry.register(user_id, "c1")

    assert registry.unregister(lease) is True
    assert registry.lookup(user_id) is None
    assert registry.unregister(lease) is False


def test_list_online_keeps_registration_order():
    registry = PresenceRegistry()
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    leases = [registry.register(u, f"c-{i}") for i, u in enumerate((a, b, c))]

    registry.unregister(leases[1])

    assert registry.list_online() == [a, c]


def test_list_online_is_a_snapshot():
    registry = PresenceRegistry()
    user_id = uuid.uuid4()
    registry.register(user_id, "c1")

    snapshot = registry.list_online()
    registry.register(uuid.uuid4(), "c2")

    assert snapshot == [user_id]
