from __future__ import annotations

import logging
import uuid

from chat_service.application.dto.message import CreateMessageDTO
from chat_service.application.dto.principal import Principal
from chat_service.application.exceptions import ForbiddenError, ValidationError
from chat_service.application.policies.messages import resolve_receiver, validate_content
from chat_service.application.policies.permissions import assert_conversation_access
from chat_service.application.ports.clock import Clock, SystemClock
from chat_service.application.uow import UnitOfWork
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


async def create_message(
    dto: CreateMessageDTO,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
    max_length: int | None = None,
) -> tuple[Message, bool]:
    """Validate and persist one message.

    Returns (message, created). If the sender already stored a message with the
    same client_msg_id the existing one is returned with created=False.
    """
    if dto.sender_id is None or dto.receiver_id is None:
        raise ValidationError("Sender and receiver are required")
    content = validate_content(dto.content, max_length=max_length)
    if dto.sender_id != principal.user_id:
        raise ForbiddenError("Cannot send messages on behalf of another user")

    conversation = await assert_conversation_access(
        principal, dto.conversation_id, dto.conversation_kind, uow.relationships,
    )
    expected = resolve_receiver(conversation, dto.sender_id)
    if expected.id != dto.receiver_id:
        raise ValidationError("Receiver is not the other participant of this conversation")

    sender = await uow.users.get_party(dto.sender_id)
    receiver = await uow.users.get_party(dto.receiver_id)
    if sender is None or receiver is None:
        raise ValidationError("Sender or receiver could not be resolved")

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        conversation_kind=conversation.kind,
        sender=sender,
        receiver=receiver,
        content=content,
        client_msg_id=dto.client_msg_id or uuid.uuid4(),
        created_at=clock.now(),
    )
    msg, created = await uow.messages_w.create_if_not_exists(msg)

    if not created and msg.conversation_id != conversation.id:
        raise ValidationError("client_msg_id was already used in another conversation")

    if created:
        await uow.commit()
        logger.info(
            "Message %s stored in %s conversation %s",
            msg.id, msg.conversation_kind, msg.conversation_id,
        )
    return msg, created


async def load_history(
    conversation_id: uuid.UUID,
    kind: ConversationKind,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Message]:
    await assert_conversation_access(principal, conversation_id, kind, uow.relationships)
    return await uow.messages.list_messages(conversation_id, kind)


async def mark_read(
    conversation_id: uuid.UUID,
    kind: ConversationKind,
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    """Flag every unread message addressed to the principal as read."""
    await assert_conversation_access(principal, conversation_id, kind, uow.relationships)
    updated = await uow.messages_w.mark_read(conversation_id, kind, principal.user_id)
    if updated:
        await uow.commit()
    return updated
