"""In-process WebSocket connection manager with conversation rooms."""
from __future__ import annotations

import logging
import uuid
from typing import Any
from uuid import UUID

from fastapi import WebSocket

from chat_service.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks one entry per WebSocket session and the rooms each session joined.

    Room membership is per session: a user with two open sockets only receives
    a room's events on the sockets that joined it.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, WebSocket] = {}
        self._rooms: dict[UUID, set[str]] = {}
        self._memberships: dict[str, set[UUID]] = {}

    async def connect(self, ws: WebSocket) -> str:
        await ws.accept()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = ws
        self._memberships[session_id] = set()
        logger.debug("WS connected: %s (total=%d)", session_id, len(self._sessions))
        return session_id

    def disconnect(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        for room in self._memberships.pop(session_id, set()):
            members = self._rooms.get(room)
            if members is None:
                continue
            members.discard(session_id)
            if not members:
                del self._rooms[room]
        logger.debug("WS disconnected: %s", session_id)

    def join(self, session_id: str, room: UUID) -> bool:
        """Add the session to the room. Returns False if it was already a member."""
        if session_id not in self._sessions:
            return False
        joined = self._memberships[session_id]
        if room in joined:
            return False
        joined.add(room)
        self._rooms.setdefault(room, set()).add(session_id)
        return True

    def leave(self, session_id: str, room: UUID) -> None:
        self._memberships.get(session_id, set()).discard(room)
        members = self._rooms.get(room)
        if members:
            members.discard(session_id)
            if not members:
                del self._rooms[room]

    def rooms_of(self, session_id: str) -> frozenset[UUID]:
        return frozenset(self._memberships.get(session_id, ()))

    def members(self, room: UUID) -> frozenset[str]:
        return frozenset(self._rooms.get(room, ()))

    async def broadcast_to_room(
        self,
        room: UUID,
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        """Send an event to every session joined to ``room``."""
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        for session_id in list(self._rooms.get(room, ())):
            ws = self._sessions.get(session_id)
            if ws is None:
                continue
            try:
                await ws.send_text(raw)
            except Exception:
                logger.debug("Dropping WS session %s after failed send", session_id, exc_info=True)
                dead.append(session_id)
        for session_id in dead:
            self.disconnect(session_id)

    async def send_to_session(
        self,
        session_id: str,
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        ws = self._sessions.get(session_id)
        if ws is None:
            return
        try:
            await ws.send_text(WsOutbound(type=event_type, data=data).model_dump_json())
        except Exception:
            logger.debug("Dropping WS session %s after failed send", session_id, exc_info=True)
            self.disconnect(session_id)
