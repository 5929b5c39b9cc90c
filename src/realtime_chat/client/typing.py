"""Typing indicator timers for both ends of a conversation."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from uuid import UUID

from realtime_chat.domain.value_objects.enums import EventType

logger = logging.getLogger(__name__)

Emit = Callable[[str, dict[str, Any]], Awaitable[None]]

DEFAULT_IDLE_SECONDS = 3.0
DEFAULT_EXPIRY_SECONDS = 5.0


class TypingDebouncer:
    """Sender side: ``isTyping: true`` on every input, one trailing ``false``.

    Each input restarts the idle timer, so a burst of keystrokes followed by
    a pause produces exactly one ``false``.
    """

    def __init__(
        self,
        emit: Emit,
        from_user: UUID,
        to_user: UUID,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
    ) -> None:
        self._emit = emit
        self._from = from_user
        self._to = to_user
        self._idle = idle_seconds
        self._pending: asyncio.Task[None] | None = None

    @property
    def is_typing(self) -> bool:
        return self._pending is not None

    def _payload(self, is_typing: bool) -> dict[str, Any]:
        return {"to": str(self._to), "from": str(self._from), "isTyping": is_typing}

    async def on_input(self) -> None:
        self._cancel_pending()
        await self._emit(EventType.TYPING, self._payload(True))
        self._pending = asyncio.create_task(self._trailing(), name=f"typing-idle-{self._to}")

    async def flush(self) -> None:
        """Stop typing now, e.g. on send or thread switch."""
        if self._pending is None:
            return
        self._cancel_pending()
        await self._emit(EventType.TYPING, self._payload(False))

    def cancel(self) -> None:
        """Drop a pending trailing emit without sending it."""
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def _trailing(self) -> None:
        await asyncio.sleep(self._idle)
        self._pending = None
        await self._emit(EventType.TYPING, self._payload(False))


class TypingTracker:
    """Receiver side: who is typing right now.

    An entry lapses after ``expiry_seconds`` without a refresh even if the
    explicit ``false`` never arrives.
    """

    def __init__(self, expiry_seconds: float = DEFAULT_EXPIRY_SECONDS) -> None:
        self._expiry = expiry_seconds
        self._timers: dict[UUID, asyncio.TimerHandle] = {}

    def update(self, user_id: UUID, is_typing: bool) -> None:
        timer = self._timers.pop(user_id, None)
        if timer is not None:
            timer.cancel()
        if is_typing:
            loop = asyncio.get_running_loop()
            self._timers[user_id] = loop.call_later(self._expiry, self._expire, user_id)

    def _expire(self, user_id: UUID) -> None:
        if self._timers.pop(user_id, None) is not None:
            logger.debug("Typing state of %s expired", user_id)

    def is_typing(self, user_id: UUID) -> bool:
        return user_id in self._timers

    def typing_users(self) -> list[UUID]:
        return list(self._timers)

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
