from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    """Read-side view of an account owned by the auth service."""

    id: UUID
    full_name: str
    profile_pic: str | None
    last_seen_at: datetime | None
