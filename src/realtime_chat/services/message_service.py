from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from realtime_chat.application.dto.message import SendMessageDTO
from realtime_chat.application.dto.principal import Principal
from realtime_chat.application.exceptions import NotFoundError, ValidationError
from realtime_chat.application.ports.media import MediaUploader
from realtime_chat.application.ports.realtime import EventBus, PresenceLookup
from realtime_chat.application.uow import UnitOfWork
from realtime_chat.config import settings
from realtime_chat.domain.entities.message import Message
from realtime_chat.domain.entities.user import User
from realtime_chat.domain.value_objects.enums import EventType, MediaKind
from realtime_chat.services import events

logger = logging.getLogger(__name__)


def _validate_content(content: SendMessageDTO) -> None:
    if content.is_empty:
        raise ValidationError("Please enter a message, image, or video.")
    if content.text and len(content.text) > settings.MESSAGE_TEXT_MAX_LENGTH:
        raise ValidationError(
            f"Message text is limited to {settings.MESSAGE_TEXT_MAX_LENGTH} characters."
        )


async def send_message(
    principal: Principal,
    receiver_id: uuid.UUID,
    content: SendMessageDTO,
    uow: UnitOfWork,
    presence: PresenceLookup,
    bus: EventBus,
    uploader: MediaUploader,
) -> Message:
    """Persist a message and push it to the receiver's live connection.

    The stored message is returned with read=False. Whether the receiver was
    online does not change the result: an offline receiver picks the message
    up from history. The sender learns about delivered/seen only through
    later bus events, never from this return value.
    """
    _validate_content(content)

    receiver = await uow.users.get_by_id(receiver_id)
    if receiver is None:
        raise NotFoundError("User not found")

    image_url = await uploader.upload(content.image, MediaKind.IMAGE) if content.image else None
    video_url = await uploader.upload(content.video, MediaKind.VIDEO) if content.video else None

    msg = Message(
        id=uuid.uuid4(),
        sender_id=principal.user_id,
        receiver_id=receiver_id,
        text=content.text or None,
        image_url=image_url,
        video_url=video_url,
        created_at=datetime.now(timezone.utc),
        read=False,
    )
    msg = await uow.messages_w.create(msg)
    await uow.commit()

    # Sender name/avatar are copied into the event now and never re-joined.
    sender = await uow.users.get_by_id(principal.user_id)
    delivered = await events.push_to_user(
        msg.receiver_id,
        EventType.NEW_MESSAGE,
        events.new_message_data(msg, events.sender_profile(principal.user_id, sender)),
        presence,
        bus,
    )
    logger.info(
        "Message %s from %s to %s stored (pushed=%s)",
        msg.id, msg.sender_id, msg.receiver_id, delivered,
    )
    return msg


async def list_messages(
    principal: Principal,
    other_user_id: uuid.UUID,
    uow: UnitOfWork,
) -> list[Message]:
    other = await uow.users.get_by_id(other_user_id)
    if other is None:
        raise NotFoundError("User not found")
    return await uow.messages.list_between(principal.user_id, other_user_id)


async def list_contacts(principal: Principal, uow: UnitOfWork) -> list[User]:
    return await uow.users.list_except(principal.user_id)


async def mark_read(
    principal: Principal,
    other_user_id: uuid.UUID,
    uow: UnitOfWork,
) -> int:
    """Mark everything ``other_user_id`` sent to the caller as read."""
    updated = await uow.messages_w.mark_read_from(other_user_id, principal.user_id)
    await uow.commit()
    if updated:
        logger.debug("Marked %d messages from %s to %s read", updated, other_user_id, principal.user_id)
    return updated


async def unread_counts(principal: Principal, uow: UnitOfWork) -> dict[uuid.UUID, int]:
    """Unread messages per sender for the caller.

    Computed on demand; a message stored while this runs shows up on the next
    poll. Failures degrade to an empty result.
    """
    try:
        return await uow.messages.unread_counts(principal.user_id)
    except Exception:
        logger.warning("Unread count aggregate failed for %s", principal.user_id, exc_info=True)
        return {}
