from __future__ import annotations

from typing import Protocol

from chat_service.domain.entities.party import Party


class UserReader(Protocol):
    async def get_party(self, user_id: int) -> Party | None: ...
