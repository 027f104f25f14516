from __future__ import annotations

from typing import Any
from uuid import UUID

from chat_service.infrastructure.ws.manager import ConnectionManager


class LocalRoomPublisher:
    """Single-instance RoomPublisher: delivers straight to this process's sessions."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def publish_to_room(self, room: UUID, event_type: str, data: dict[str, Any]) -> None:
        await self._manager.broadcast_to_room(room, event_type, data)
