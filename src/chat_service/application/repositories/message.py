from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind


class MessageReader(Protocol):
    async def list_messages(
        self,
        conversation_id: UUID,
        kind: ConversationKind,
    ) -> list[Message]:
        """All messages of the conversation, oldest first."""
        ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_msg_id → return existing."""
        ...

    async def mark_read(
        self,
        conversation_id: UUID,
        kind: ConversationKind,
        receiver_id: int,
    ) -> int: ...
