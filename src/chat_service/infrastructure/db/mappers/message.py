from __future__ import annotations

from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.infrastructure.db.mappers import party
from chat_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    kind = ConversationKind(model.type)
    conversation_id = model.application_id if kind == ConversationKind.JOB else model.booking_id
    return Message(
        id=model.id,
        conversation_id=conversation_id,  # type: ignore[arg-type]
        conversation_kind=kind,
        sender=party.model_to_entity(model.sender),
        receiver=party.model_to_entity(model.receiver),
        content=model.content,
        client_msg_id=model.client_msg_id,
        created_at=model.created_at,
        read=model.read,
    )


def entity_to_values(entity: Message) -> dict:
    """Column values for an INSERT; parties are stored by id only."""
    return {
        "id": entity.id,
        "type": entity.conversation_kind.value,
        "application_id": entity.application_id,
        "booking_id": entity.booking_id,
        "sender_id": entity.sender.id,
        "receiver_id": entity.receiver.id,
        "content": entity.content,
        "read": entity.read,
        "client_msg_id": entity.client_msg_id,
        "created_at": entity.created_at,
    }
