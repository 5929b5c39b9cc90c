from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from realtime_chat.application.dto.events import SenderProfile
from realtime_chat.application.ports.realtime import EventBus, PresenceStore
from realtime_chat.application.uow import UnitOfWork
from realtime_chat.domain.entities.presence import PresenceLease
from realtime_chat.domain.value_objects.enums import EventType
from realtime_chat.services import events

logger = logging.getLogger(__name__)


async def _touch_last_seen(user_id: UUID, uow: UnitOfWork) -> SenderProfile:
    try:
        await uow.users_w.touch_last_seen(user_id, datetime.now(timezone.utc))
        await uow.commit()
        user = await uow.users.get_by_id(user_id)
    except Exception:
        logger.exception("Failed to update last seen for %s", user_id)
        user = None
    return events.sender_profile(user_id, user)


async def user_connected(
    lease: PresenceLease,
    presence: PresenceStore,
    bus: EventBus,
    uow: UnitOfWork,
) -> SenderProfile:
    """Announce the user holding ``lease`` as online.

    The caller registers the lease before calling, so events addressed to
    this user already find the new connection.
    """
    await bus.broadcast(EventType.ONLINE_USERS, events.online_users_data(presence))

    profile = await _touch_last_seen(lease.user_id, uow)
    await bus.broadcast(EventType.USER_ONLINE, events.presence_data(profile))
    logger.info(
        "User %s online on %s (generation=%d)",
        lease.user_id, lease.connection_id, lease.generation,
    )
    return profile


async def user_disconnected(
    lease: PresenceLease,
    presence: PresenceStore,
    bus: EventBus,
    uow: UnitOfWork,
) -> bool:
    """Undo ``lease`` and announce the user as offline.

    A lease superseded by a reconnect is a no-op: the user is still online
    through the newer connection, so nothing is broadcast.
    """
    if not presence.unregister(lease):
        logger.info(
            "Ignoring disconnect of superseded connection %s for %s",
            lease.connection_id, lease.user_id,
        )
        return False

    await bus.broadcast(EventType.ONLINE_USERS, events.online_users_data(presence))

    profile = await _touch_last_seen(lease.user_id, uow)
    await bus.broadcast(EventType.USER_OFFLINE, events.presence_data(profile))
    logger.info("User %s offline (connection %s)", lease.user_id, lease.connection_id)
    return True
