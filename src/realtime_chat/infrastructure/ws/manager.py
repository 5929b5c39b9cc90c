"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from realtime_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """One addressable channel per live WebSocket, keyed by connection id.

    Implements application.ports.realtime.EventBus. Delivery is best effort:
    sends to unknown ids are dropped, and a socket that fails a write is
    evicted instead of surfacing the error to the caller.
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    async def connect(self, ws: WebSocket) -> str:
        await ws.accept()
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = ws
        logger.debug("WS connected: %s (total=%d)", connection_id, len(self._connections))
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        if self._connections.pop(connection_id, None) is not None:
            logger.debug("WS disconnected: %s", connection_id)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def send(self, connection_id: str, event_type: str, data: Any) -> bool:
        """Send one event to one connection. Returns False if it was not delivered."""
        ws = self._connections.get(connection_id)
        if ws is None:
            logger.debug("Dropped %s for gone connection %s", event_type, connection_id)
            return False
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            await ws.send_text(raw)
        except Exception:
            logger.warning("Evicting connection %s after failed %s", connection_id, event_type)
            self.disconnect(connection_id)
            return False
        return True

    async def broadcast(self, event_type: str, data: Any) -> None:
        """Send the same event to every live connection."""
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        for connection_id, ws in list(self._connections.items()):
            try:
                await ws.send_text(raw)
            except Exception:
                dead.append(connection_id)
        for connection_id in dead:
            logger.warning("Evicting connection %s after failed %s broadcast", connection_id, event_type)
            self.disconnect(connection_id)
