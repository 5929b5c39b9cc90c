"""Outbound realtime payloads and targeted delivery."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from realtime_chat.application.dto.events import SenderProfile
from realtime_chat.application.ports.realtime import EventBus, PresenceLookup
from realtime_chat.config import settings
from realtime_chat.domain.entities.message import Message
from realtime_chat.domain.entities.user import User

logger = logging.getLogger(__name__)


def sender_profile(user_id: UUID, user: User | None) -> SenderProfile:
    if user is None:
        return SenderProfile(
            user_id=user_id,
            name=settings.DEFAULT_SENDER_NAME,
            profile_pic=settings.DEFAULT_AVATAR_URL,
        )
    return SenderProfile(
        user_id=user.id,
        name=user.full_name or settings.DEFAULT_SENDER_NAME,
        profile_pic=user.profile_pic or settings.DEFAULT_AVATAR_URL,
    )


def message_data(message: Message) -> dict[str, Any]:
    return {
        "id": str(message.id),
        "senderId": str(message.sender_id),
        "receiverId": str(message.receiver_id),
        "text": message.text,
        "imageUrl": message.image_url,
        "videoUrl": message.video_url,
        "read": message.read,
        "createdAt": message.created_at.isoformat(),
    }


def new_message_data(message: Message, sender: SenderProfile) -> dict[str, Any]:
    return {
        **message_data(message),
        "senderName": sender.name,
        "senderProfilePic": sender.profile_pic,
    }


def presence_data(profile: SenderProfile) -> dict[str, Any]:
    return {
        "userId": str(profile.user_id),
        "fullName": profile.name,
        "profilePicUrl": profile.profile_pic,
    }


def online_users_data(presence: PresenceLookup) -> list[str]:
    return [str(user_id) for user_id in presence.list_online()]


async def push_to_user(
    user_id: UUID,
    event_type: str,
    data: Any,
    presence: PresenceLookup,
    bus: EventBus,
) -> bool:
    """Send to the user's current connection, if any.

    The lookup happens here, right before the send, so the connection id is
    never reused across an earlier suspension point.
    """
    connection_id = presence.lookup(user_id)
    if connection_id is None:
        logger.debug("%s for offline user %s dropped", event_type, user_id)
        return False
    return await bus.send(connection_id, event_type, data)
