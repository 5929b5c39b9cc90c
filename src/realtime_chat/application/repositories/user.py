from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from realtime_chat.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def list_except(self, user_id: UUID) -> list[User]: ...


class UserWriter(Protocol):
    async def touch_last_seen(self, user_id: UUID, ts: datetime) -> None: ...
