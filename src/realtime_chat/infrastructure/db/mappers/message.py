from __future__ import annotations

from realtime_chat.domain.entities.message import Message
from realtime_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        text=model.text,
        image_url=model.image_url,
        video_url=model.video_url,
        created_at=model.created_at,
        read=model.read,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        text=entity.text,
        image_url=entity.image_url,
        video_url=entity.video_url,
        created_at=entity.created_at,
        read=entity.read,
    )
