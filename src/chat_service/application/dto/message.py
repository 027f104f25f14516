from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from chat_service.domain.value_objects.enums import ConversationKind


@dataclass(frozen=True, slots=True)
class CreateMessageDTO:
    sender_id: int | None
    receiver_id: int | None
    content: str
    conversation_id: UUID
    conversation_kind: ConversationKind
    client_msg_id: UUID | None = None
