"""Relays of client-emitted typing and receipt events."""
from __future__ import annotations

import logging
from uuid import UUID

from realtime_chat.application.dto.events import SenderProfile
from realtime_chat.application.ports.realtime import EventBus, PresenceLookup
from realtime_chat.application.uow import UnitOfWork
from realtime_chat.domain.value_objects.enums import EventType
from realtime_chat.services import events

logger = logging.getLogger(__name__)


async def relay_typing(
    sender: SenderProfile,
    to: UUID,
    is_typing: bool,
    presence: PresenceLookup,
    bus: EventBus,
) -> bool:
    return await events.push_to_user(
        to,
        EventType.TYPING,
        {
            "from": str(sender.user_id),
            "isTyping": is_typing,
            "senderName": sender.name,
            "senderProfilePic": sender.profile_pic,
        },
        presence,
        bus,
    )


async def relay_delivered(
    receiver_id: UUID,
    to: UUID,
    message_id: UUID,
    presence: PresenceLookup,
    bus: EventBus,
) -> bool:
    return await events.push_to_user(
        to,
        EventType.DELIVERED,
        {"from": str(receiver_id), "messageId": str(message_id)},
        presence,
        bus,
    )


async def relay_seen(
    viewer_id: UUID,
    to: UUID,
    message_ids: list[UUID],
    uow: UnitOfWork,
    presence: PresenceLookup,
    bus: EventBus,
) -> bool:
    """Mark ``to``'s messages to the viewer read, then tell ``to``.

    The durable update covers every unread message of the pair, not only
    ``message_ids``. If it fails the receipt is still relayed; the next
    explicit mark-read call catches the store up.
    """
    try:
        updated = await uow.messages_w.mark_read_from(to, viewer_id)
        await uow.commit()
        logger.debug("seen from %s marked %d messages of %s read", viewer_id, updated, to)
    except Exception:
        logger.exception("Failed to persist seen from %s for sender %s", viewer_id, to)

    return await events.push_to_user(
        to,
        EventType.SEEN,
        {"from": str(viewer_id), "messageIds": [str(m) for m in message_ids]},
        presence,
        bus,
    )
