from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    """Realtime event names as they appear on the wire."""

    ONLINE_USERS = "getOnlineUsers"
    USER_ONLINE = "user-online"
    USER_OFFLINE = "user-offline"
    TYPING = "typing"
    DELIVERED = "delivered"
    SEEN = "seen"
    NEW_MESSAGE = "newMessage"
    ERROR = "error"
    PING = "ping"
    PONG = "pong"


class MessageStatus(StrEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    SEEN = "seen"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def advance(self, other: MessageStatus) -> MessageStatus:
        """Return whichever status is further along."""
        return other if other.rank > self.rank else self


_STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.SEEN: 2,
}


class MediaKind(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
