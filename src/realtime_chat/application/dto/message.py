from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    text: str | None = None
    image: str | None = None
    video: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.image or self.video)
