from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from realtime_chat.api.v1.schemas.common import CamelModel
from realtime_chat.config import settings


class SendMessageRequest(CamelModel):
    text: str | None = Field(None, max_length=settings.MESSAGE_TEXT_MAX_LENGTH)
    image: str | None = None
    video: str | None = None


class MessageResponse(CamelModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None
    image_url: str | None
    video_url: str | None
    read: bool
    created_at: datetime


class MarkReadResponse(CamelModel):
    updated: int
