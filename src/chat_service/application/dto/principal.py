from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: int

    @property
    def principal_key(self) -> str:
        return f"user:{self.user_id}"
