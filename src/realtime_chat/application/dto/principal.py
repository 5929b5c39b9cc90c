from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from the session JWT."""

    user_id: UUID

    @property
    def principal_key(self) -> str:
        """Key used in log lines and registry diagnostics."""
        return f"user:{self.user_id}"
