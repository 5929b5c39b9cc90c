from __future__ import annotations

import json

import pytest

from realtime_chat.infrastructure.ws.manager import ConnectionManager


class FakeWebSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.broken = broken
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(raw))


@pytest.mark.asyncio
async def test_connect_accepts_and_assigns_unique_ids():
    manager = ConnectionManager()
    ws1, ws2 = FakeWebSocket(), FakeWebSocket()

    id1 = await manager.connect(ws1)
    id2 = await manager.connect(ws2)

    assert ws1.accepted and ws2.accepted
    assert id1 != id2
    assert len(manager) == 2


@pytest.mark.asyncio
async def test_send_wraps_event_envelope():
    manager = ConnectionManager()
    ws = FakeWebSocket()
    cid = await manager.connect(ws)

    assert await manager.send(cid, "typing", {"isTyping": True}) is True
    assert ws.sent == [{"type": "typing", "data": {"isTyping": True}}]


@pytest.mark.asyncio
async def test_send_to_unknown_connection_is_dropped():
    manager = ConnectionManager()

    assert await manager.send("nope", "typing", {}) is False


@pytest.mark.asyncio
async def test_send_failure_evicts_socket():
    manager = ConnectionManager()
    cid = await manager.connect(FakeWebSocket(broken=True))

    assert await manager.send(cid, "newMessage", {}) is False
    assert not manager.is_connected(cid)


@pytest.mark.asyncio
async def test_broadcast_reaches_live_sockets_and_evicts_dead():
    manager = ConnectionManager()
    live = FakeWebSocket()
    live_id = await manager.connect(live)
    dead_id = await manager.connect(FakeWebSocket(broken=True))

    await manager.broadcast("getOnlineUsers", ["u1"])

    assert live.sent == [{"type": "getOnlineUsers", "data": ["u1"]}]
    assert manager.is_connected(live_id)
    assert not manager.is_connected(dead_id)


@pytest.mark.asyncio
async def test_disconnect_is_idempotent():
    manager = ConnectionManager()
    cid = await manager.connect(FakeWebSocket())

    manager.disconnect(cid)
    manager.disconnect(cid)

    assert len(manager) == 0
