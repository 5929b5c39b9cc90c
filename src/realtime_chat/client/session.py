"""Client-side view of one user's chat: the active thread, receipts, presence.

The displayed thread is the union of REST history and live ``newMessage``
events, de-duplicated by message id and ordered by ``(created_at, id)``.
Message status only moves forward (sent -> delivered -> seen), whatever the
order or number of receipt events.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Iterable
from uuid import UUID

from realtime_chat.client.dispatcher import EventDispatcher, Handler
from realtime_chat.client.models import MessageView, WireMessage
from realtime_chat.client.typing import (
    DEFAULT_EXPIRY_SECONDS,
    DEFAULT_IDLE_SECONDS,
    Emit,
    TypingDebouncer,
    TypingTracker,
)
from realtime_chat.domain.value_objects.enums import EventType, MessageStatus

logger = logging.getLogger(__name__)

HistoryFetcher = Callable[[UUID], Awaitable[Iterable[Any]]]

# Receipts for ids not in the view yet, e.g. a delivered event that beats the
# send response. Oldest entries are dropped first.
MAX_EARLY_RECEIPTS = 1000


class ChatSession:
    def __init__(
        self,
        user_id: UUID,
        dispatcher: EventDispatcher,
        emit: Emit,
        *,
        typing_idle_seconds: float = DEFAULT_IDLE_SECONDS,
        typing_expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
    ) -> None:
        self.user_id = user_id
        self.peer_id: UUID | None = None
        self.online_users: list[UUID] = []
        self.unread: dict[UUID, int] = {}
        self.typing = TypingTracker(typing_expiry_seconds)

        self._dispatcher = dispatcher
        self._emit = emit
        self._typing_idle = typing_idle_seconds
        self._debouncer: TypingDebouncer | None = None
        self._messages: dict[UUID, MessageView] = {}
        self._early_receipts: OrderedDict[UUID, MessageStatus] = OrderedDict()
        self._thread_handler: Handler | None = None

        self._global_handlers: list[tuple[str, Handler]] = [
            (EventType.NEW_MESSAGE, self._count_unread),
            (EventType.DELIVERED, self._on_delivered),
            (EventType.SEEN, self._on_seen),
            (EventType.ONLINE_USERS, self._on_online_users),
            (EventType.USER_ONLINE, self._on_user_online),
            (EventType.USER_OFFLINE, self._on_user_offline),
            (EventType.TYPING, self._on_typing),
        ]
        for event_type, handler in self._global_handlers:
            dispatcher.on(event_type, handler)

    # -- view -----------------------------------------------------------------

    @property
    def messages(self) -> list[MessageView]:
        return sorted(self._messages.values(), key=lambda v: v.sort_key)

    def status_of(self, message_id: UUID) -> MessageStatus | None:
        view = self._messages.get(message_id)
        return view.status if view else None

    def online_count(self) -> int:
        """Online users other than the viewer, however the viewer's own
        registration raced with the presence broadcast."""
        return len({u for u in self.online_users if u != self.user_id})

    def is_online(self, user_id: UUID) -> bool:
        return user_id in self.online_users

    # -- thread lifecycle -----------------------------------------------------

    async def open_thread(self, peer_id: UUID, fetch_history: HistoryFetcher) -> None:
        """Switch the active thread to ``peer_id`` and load its history.

        The handler for the previous thread is removed before the new one is
        added, and the new one is live before history is requested, so a
        message stored while the fetch is in flight arrives through one path
        or the other.
        """
        if self._debouncer is not None:
            await self._debouncer.flush()
            self._debouncer = None
        if self._thread_handler is not None:
            self._dispatcher.off(EventType.NEW_MESSAGE, self._thread_handler)

        self.peer_id = peer_id
        self._messages.clear()
        self._thread_handler = self._make_thread_handler(peer_id)
        self._dispatcher.on(EventType.NEW_MESSAGE, self._thread_handler)

        history = await fetch_history(peer_id)
        if self.peer_id != peer_id:
            logger.debug("Discarding history for %s after thread switch", peer_id)
            return
        for item in history:
            msg = WireMessage.model_validate(item)
            self._merge(msg, self._initial_status(msg))
        self.unread.pop(peer_id, None)
        await self.mark_seen()

    async def close_thread(self) -> None:
        if self._debouncer is not None:
            await self._debouncer.flush()
            self._debouncer = None
        if self._thread_handler is not None:
            self._dispatcher.off(EventType.NEW_MESSAGE, self._thread_handler)
            self._thread_handler = None
        self.peer_id = None
        self._messages.clear()

    def close(self) -> None:
        """Detach from the dispatcher and drop pending typing timers unsent."""
        if self._debouncer is not None:
            self._debouncer.cancel()
            self._debouncer = None
        for event_type, handler in self._global_handlers:
            self._dispatcher.off(event_type, handler)
        if self._thread_handler is not None:
            self._dispatcher.off(EventType.NEW_MESSAGE, self._thread_handler)
            self._thread_handler = None
        self.typing.clear()

    def _make_thread_handler(self, peer_id: UUID) -> Handler:
        async def on_new_message(data: Any) -> None:
            msg = WireMessage.model_validate(data)
            if msg.sender_id != peer_id:
                return
            is_new = msg.id not in self._messages
            self._merge(msg, MessageStatus.DELIVERED)
            if is_new:
                await self._emit(
                    EventType.DELIVERED,
                    {"to": str(msg.sender_id), "messageId": str(msg.id)},
                )
            await self.mark_seen()

        return on_new_message

    # -- local actions --------------------------------------------------------

    async def record_sent(self, data: Any) -> MessageView | None:
        """Add the send response to the view at status ``sent``.

        Sending ends the typing burst. A response for a thread that is no
        longer active is ignored; it comes back with that thread's history.
        """
        if self._debouncer is not None:
            await self._debouncer.flush()
        msg = WireMessage.model_validate(data)
        if msg.receiver_id != self.peer_id:
            return None
        return self._merge(msg, MessageStatus.SENT)

    async def mark_seen(self) -> list[UUID]:
        """Mark every incoming message of the active thread seen and tell the sender."""
        if self.peer_id is None:
            return []
        unseen = [
            view for view in self._messages.values()
            if view.message.sender_id == self.peer_id
            and view.message.receiver_id == self.user_id
            and view.status is not MessageStatus.SEEN
        ]
        if not unseen:
            return []
        for view in unseen:
            self._apply(view, MessageStatus.SEEN)
        ids = [view.id for view in sorted(unseen, key=lambda v: v.sort_key)]
        await self._emit(
            EventType.SEEN,
            {"to": str(self.peer_id), "messageIds": [str(i) for i in ids]},
        )
        return ids

    async def on_input(self) -> None:
        if self.peer_id is None:
            return
        if self._debouncer is None:
            self._debouncer = TypingDebouncer(
                self._emit, self.user_id, self.peer_id, self._typing_idle,
            )
        await self._debouncer.on_input()

    # -- reconciliation -------------------------------------------------------

    def _initial_status(self, msg: WireMessage) -> MessageStatus:
        if msg.read:
            return MessageStatus.SEEN
        if msg.sender_id == self.user_id:
            return MessageStatus.SENT
        # Incoming and present in our history: it has reached this client.
        return MessageStatus.DELIVERED

    def _merge(self, msg: WireMessage, status: MessageStatus) -> MessageView:
        early = self._early_receipts.pop(msg.id, None)
        if early is not None:
            status = status.advance(early)
        view = self._messages.get(msg.id)
        if view is None:
            view = MessageView(message=msg, status=status)
            self._messages[msg.id] = view
            if msg.read:
                self._apply(view, MessageStatus.SEEN)
        else:
            if msg.read and not view.message.read:
                view.message = msg
            self._apply(view, status)
        return view

    def _apply(self, view: MessageView, status: MessageStatus) -> None:
        view.status = view.status.advance(status)
        if view.status is MessageStatus.SEEN and not view.message.read:
            view.message = view.message.model_copy(update={"read": True})

    def _advance(self, message_id: UUID, status: MessageStatus) -> None:
        view = self._messages.get(message_id)
        if view is not None:
            self._apply(view, status)
            return
        known = self._early_receipts.pop(message_id, None)
        self._early_receipts[message_id] = known.advance(status) if known else status
        while len(self._early_receipts) > MAX_EARLY_RECEIPTS:
            self._early_receipts.popitem(last=False)

    # -- global handlers ------------------------------------------------------

    async def _count_unread(self, data: Any) -> None:
        msg = WireMessage.model_validate(data)
        if msg.receiver_id == self.user_id and msg.sender_id != self.peer_id:
            self.unread[msg.sender_id] = self.unread.get(msg.sender_id, 0) + 1

    async def _on_delivered(self, data: Any) -> None:
        self._advance(UUID(data["messageId"]), MessageStatus.DELIVERED)

    async def _on_seen(self, data: Any) -> None:
        for message_id in data.get("messageIds", []):
            self._advance(UUID(message_id), MessageStatus.SEEN)

    async def _on_online_users(self, data: Any) -> None:
        self.online_users = [UUID(u) for u in data]

    async def _on_user_online(self, data: Any) -> None:
        user_id = UUID(data["userId"])
        if user_id not in self.online_users:
            self.online_users.append(user_id)

    async def _on_user_offline(self, data: Any) -> None:
        user_id = UUID(data["userId"])
        self.online_users = [u for u in self.online_users if u != user_id]

    async def _on_typing(self, data: Any) -> None:
        self.typing.update(UUID(data["from"]), bool(data.get("isTyping", True)))
