from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class PresenceLease:
    """Proof of one presence registration; needed to undo it."""

    user_id: UUID
    connection_id: str
    generation: int
