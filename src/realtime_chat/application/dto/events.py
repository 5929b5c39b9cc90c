from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class SenderProfile:
    """Display metadata denormalized into outbound events at emit time."""

    user_id: UUID
    name: str
    profile_pic: str
