from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.domain.entities.party import Party
from chat_service.infrastructure.db.mappers import party as mapper
from chat_service.infrastructure.db.models.marketplace import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_party(self, user_id: int) -> Party | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(model) if model else None
