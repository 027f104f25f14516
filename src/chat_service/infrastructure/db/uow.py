from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from chat_service.infrastructure.db.repositories.relationship import RelationshipRepo
from chat_service.infrastructure.db.repositories.user import UserReaderRepo


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.relationships = RelationshipRepo(session)
        self.users = UserReaderRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
