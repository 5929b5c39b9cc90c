from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from realtime_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]


class EventDispatcher:
    """Routes server events to subscribed handlers, in subscription order."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event_type: str, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def off(self, event_type: str, handler: Handler | None = None) -> None:
        """Remove one handler, or every handler for the event when none is given."""
        if handler is None:
            self._handlers.pop(event_type, None)
            return
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))

    async def dispatch(self, event_type: str, data: Any) -> None:
        for handler in list(self._handlers.get(event_type, ())):
            await handler(data)

    async def dispatch_raw(self, raw: str | bytes) -> None:
        envelope = WsOutbound.model_validate_json(raw)
        await self.dispatch(envelope.type, envelope.data)
