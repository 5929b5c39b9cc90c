from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from realtime_chat.domain.entities.presence import PresenceLease


class EventBus(Protocol):
    """Best-effort delivery to live connections; nothing is queued."""

    async def send(self, connection_id: str, event_type: str, data: Any) -> bool: ...

    async def broadcast(self, event_type: str, data: Any) -> None: ...


class PresenceLookup(Protocol):
    def lookup(self, user_id: UUID) -> str | None: ...

    def list_online(self) -> list[UUID]: ...


class PresenceStore(PresenceLookup, Protocol):
    def register(self, user_id: UUID, connection_id: str) -> PresenceLease: ...

    def unregister(self, lease: PresenceLease) -> bool: ...
