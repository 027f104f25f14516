from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_room_event(room: UUID, event_type: str, data: dict[str, Any]) -> str:
    envelope = {"room": room, "type": event_type, "data": data}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_room_event(raw: str | bytes) -> tuple[UUID, str, dict[str, Any]]:
    """Inverse of :func:`serialize_room_event`. Raises ``ValueError``/``KeyError`` on malformed input."""
    envelope = json.loads(raw)
    return UUID(envelope["room"]), envelope["type"], envelope["data"]
