from __future__ import annotations

from typing import Protocol

from chat_service.application.repositories.message import MessageReader, MessageWriter
from chat_service.application.repositories.relationship import RelationshipLookup
from chat_service.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    relationships: RelationshipLookup
    users: UserReader
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
