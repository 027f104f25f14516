from __future__ import annotations

import uuid

from chat_service.application.dto.conversation import ResolvedConversations
from chat_service.application.dto.principal import Principal
from chat_service.application.policies.permissions import assert_conversation_access
from chat_service.application.repositories.relationship import RelationshipReader
from chat_service.application.uow import UnitOfWork
from chat_service.domain.entities.conversation import Conversation
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.services.connection_resolver import resolve_conversations


async def list_user_conversations(
    principal: Principal,
    reader: RelationshipReader,
) -> ResolvedConversations:
    return await resolve_conversations(principal.user_id, reader)


async def get_conversation(
    conversation_id: uuid.UUID,
    kind: ConversationKind | None,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    """Return the conversation as seen by ``principal``.

    Pass ``kind=None`` when only the room id is known (WebSocket joins).
    """
    return await assert_conversation_access(principal, conversation_id, kind, uow.relationships)
