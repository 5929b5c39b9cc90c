"""Process-local registry of which users hold a live connection."""
from __future__ import annotations

import itertools
import logging
import threading
from uuid import UUID

from realtime_chat.domain.entities.presence import PresenceLease

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Maps each online user to the connection that registered last.

    The key set is exactly the set of online users. A reconnect overwrites
    the previous entry with a new generation, so a late disconnect of the
    superseded connection cannot evict the newer one. Every lookup is a
    snapshot: callers must not hold on to it across an await.
    """

    def __init__(self) -> None:
        self._entries: dict[UUID, PresenceLease] = {}
        self._generations = itertools.count(1)
        self._lock = threading.Lock()

    def register(self, user_id: UUID, connection_id: str) -> PresenceLease:
        with self._lock:
            lease = PresenceLease(user_id, connection_id, next(self._generations))
            previous = self._entries.get(user_id)
            self._entries[user_id] = lease
        if previous is not None:
            logger.debug(
                "Presence for %s moved from %s to %s",
                user_id, previous.connection_id, connection_id,
            )
        return lease

    def unregister(self, lease: PresenceLease) -> bool:
        """Remove the entry if ``lease`` still owns it. Returns whether it did."""
        with self._lock:
            current = self._entries.get(lease.user_id)
            if current is None or current.generation != lease.generation:
                return False
            del self._entries[lease.user_id]
        return True

    def lookup(self, user_id: UUID) -> str | None:
        with self._lock:
            lease = self._entries.get(user_id)
        return lease.connection_id if lease else None

    def is_online(self, user_id: UUID) -> bool:
        with self._lock:
            return user_id in self._entries

    def list_online(self) -> list[UUID]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
