from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter

from chat_service.api.deps import CurrentPrincipal, RoomPublisherDep, UoWDep
from chat_service.api.v1.schemas.message import (
    CreateMessageRequest,
    MarkReadResponse,
    MessageResponse,
)
from chat_service.application.dto.message import CreateMessageDTO
from chat_service.config import settings
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.infrastructure.ws.protocol import RECEIVE_MESSAGE
from chat_service.services import message_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["messages"])


@router.get("/{kind}/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    kind: ConversationKind,
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.load_history(conversation_id, kind, principal, uow)
    return [MessageResponse.from_entity(m) for m in messages]


@router.post(
    "/{kind}/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def create_message(
    kind: ConversationKind,
    conversation_id: UUID,
    body: CreateMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    publisher: RoomPublisherDep,
) -> MessageResponse:
    dto = CreateMessageDTO(
        sender_id=body.sender_id,
        receiver_id=body.receiver_id,
        content=body.content,
        conversation_id=conversation_id,
        conversation_kind=kind,
        client_msg_id=body.client_msg_id,
    )
    msg, created = await message_service.create_message(
        dto, principal, uow, max_length=settings.MESSAGE_MAX_LENGTH or None,
    )
    response = MessageResponse.from_entity(msg)
    if created:
        try:
            await publisher.publish_to_room(msg.conversation_id, RECEIVE_MESSAGE, response.to_wire())
        except Exception:
            logger.exception("Room fan-out failed for message %s", msg.id)
    return response


@router.post("/{kind}/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    kind: ConversationKind,
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await message_service.mark_read(conversation_id, kind, principal, uow)
    return MarkReadResponse(updated=updated)
