from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class RoomPublisher(Protocol):
    """Fans an event out to every session joined to a conversation room."""

    async def publish_to_room(self, room: UUID, event_type: str, data: dict[str, Any]) -> None: ...
