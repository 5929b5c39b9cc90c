"""Wire models as seen by a connected client."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from realtime_chat.api.v1.schemas.common import CamelModel
from realtime_chat.domain.value_objects.enums import MessageStatus


class WireMessage(CamelModel):
    """A message from REST history, a send response or a ``newMessage`` event."""

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    read: bool = False
    created_at: datetime
    sender_name: str | None = None
    sender_profile_pic: str | None = None


@dataclass(slots=True)
class MessageView:
    message: WireMessage
    status: MessageStatus

    @property
    def id(self) -> UUID:
        return self.message.id

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return self.message.created_at, str(self.message.id)
