from __future__ import annotations

from typing import Protocol

from realtime_chat.domain.value_objects.enums import MediaKind


class MediaUploader(Protocol):
    async def upload(self, data: str, kind: MediaKind) -> str:
        """Store the media and return its public URL."""
        ...
