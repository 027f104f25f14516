from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from chat_service.domain.entities.party import Party
from chat_service.domain.value_objects.enums import ConversationKind


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    conversation_kind: ConversationKind
    sender: Party
    receiver: Party
    content: str
    client_msg_id: UUID
    created_at: datetime
    read: bool = False

    @property
    def application_id(self) -> UUID | None:
        return self.conversation_id if self.conversation_kind == ConversationKind.JOB else None

    @property
    def booking_id(self) -> UUID | None:
        return self.conversation_id if self.conversation_kind == ConversationKind.SERVICE else None
