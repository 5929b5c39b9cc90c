from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from realtime_chat.api.v1.schemas.common import CamelModel


class ContactResponse(CamelModel):
    id: UUID
    full_name: str
    profile_pic_url: str | None = Field(
        None, validation_alias="profile_pic", serialization_alias="profilePicUrl",
    )
    last_seen_at: datetime | None
