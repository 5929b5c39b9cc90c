from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None
    image_url: str | None
    video_url: str | None
    created_at: datetime
    read: bool = False
