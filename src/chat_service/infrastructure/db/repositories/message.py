from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.infrastructure.db.mappers import message as mapper
from chat_service.infrastructure.db.models.message import MessageModel


def _conversation_filter(conversation_id: UUID, kind: ConversationKind):
    if kind == ConversationKind.JOB:
        return (MessageModel.type == kind.value) & (MessageModel.application_id == conversation_id)
    return (MessageModel.type == kind.value) & (MessageModel.booking_id == conversation_id)


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(
        self,
        conversation_id: UUID,
        kind: ConversationKind,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(_conversation_filter(conversation_id, kind))
            .order_by(MessageModel.created_at.asc(), MessageModel.seq.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.unique().scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message idempotently. Returns (message, created_flag)."""
        stmt = (
            pg_insert(MessageModel)
            .values(**mapper.entity_to_values(message))
            .on_conflict_do_nothing(constraint="uq_message_idempotency")
            .returning(MessageModel.id)
        )
        result = await self._session.execute(stmt)
        inserted_id = result.scalar_one_or_none()

        if inserted_id is not None:
            return message, True

        # Conflict: the sender already stored this client_msg_id
        existing = await self.get_by_client_msg_id(message.sender.id, message.client_msg_id)  # type: ignore[arg-type]
        assert existing is not None
        return existing, False

    async def get_by_client_msg_id(
        self,
        sender_id: int,
        client_msg_id: UUID,
    ) -> Message | None:
        stmt = select(MessageModel).where(
            MessageModel.sender_id == sender_id,
            MessageModel.client_msg_id == client_msg_id,
        )
        result = await self._session.execute(stmt)
        model = result.unique().scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def mark_read(
        self,
        conversation_id: UUID,
        kind: ConversationKind,
        receiver_id: int,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                _conversation_filter(conversation_id, kind),
                MessageModel.receiver_id == receiver_id,
                MessageModel.read.is_(False),
            )
            .values(read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
