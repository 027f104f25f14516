from __future__ import annotations

from uuid import UUID

from chat_service.application.dto.principal import Principal
from chat_service.application.exceptions import ForbiddenError, NotFoundError
from chat_service.application.repositories.relationship import RelationshipLookup
from chat_service.domain.entities.conversation import (
    Conversation,
    JobConversation,
    ServiceConversation,
)
from chat_service.domain.value_objects.enums import ConversationKind


async def load_conversation(
    conversation_id: UUID,
    kind: ConversationKind | None,
    relationships: RelationshipLookup,
    viewer_id: int,
) -> Conversation | None:
    """Materialize a conversation from its relationship, or None if it is not approved.

    With ``kind=None`` both id spaces are searched; they never overlap.
    """
    if kind in (None, ConversationKind.JOB):
        application = await relationships.get_application(conversation_id)
        if application is not None:
            if not application.is_approved:
                return None
            return JobConversation.from_application(application, viewer_id)
    if kind in (None, ConversationKind.SERVICE):
        booking = await relationships.get_booking(conversation_id)
        if booking is not None:
            if not booking.is_approved:
                return None
            return ServiceConversation.from_booking(booking, viewer_id)
    return None


async def assert_conversation_access(
    principal: Principal,
    conversation_id: UUID,
    kind: ConversationKind | None,
    relationships: RelationshipLookup,
) -> Conversation:
    """Raise if the conversation doesn't exist or the principal is not one of its two parties."""
    conversation = await load_conversation(
        conversation_id, kind, relationships, principal.user_id,
    )
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if conversation.role_of(principal.user_id) is None:
        raise ForbiddenError("Not a participant of this conversation")

    return conversation
