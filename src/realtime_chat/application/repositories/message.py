from __future__ import annotations

from typing import Protocol
from uuid import UUID

from realtime_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_between(self, user_a: UUID, user_b: UUID) -> list[Message]:
        """Both directions of a pair, ordered by (created_at, id) ascending."""
        ...

    async def unread_counts(self, receiver_id: UUID) -> dict[UUID, int]: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        """Set read=true on every unread sender->receiver message. Returns rows updated."""
        ...
