from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Party:
    """A marketplace user as seen from a conversation."""

    id: int | None
    display_name: str
    email: str = ""

    @property
    def resolved(self) -> bool:
        return self.id is not None


UNKNOWN_PARTY = Party(id=None, display_name="Unknown")
