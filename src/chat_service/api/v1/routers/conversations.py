from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from chat_service.api.deps import CurrentPrincipal, RelationshipReaderDep, UoWDep
from chat_service.api.v1.schemas.conversation import (
    ConversationListResponse,
    ConversationOut,
    JobConversationOut,
    ServiceConversationOut,
    conversation_out,
)
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    principal: CurrentPrincipal,
    reader: RelationshipReaderDep,
) -> ConversationListResponse:
    resolved = await conversation_service.list_user_conversations(principal, reader)
    return ConversationListResponse.from_resolved(resolved)


@router.get("/{kind}/{conversation_id}", response_model=ConversationOut)
async def get_conversation(
    kind: ConversationKind,
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> JobConversationOut | ServiceConversationOut:
    conv = await conversation_service.get_conversation(conversation_id, kind, principal, uow)
    return conversation_out(conv)
