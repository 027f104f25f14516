from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from chat_service.api.v1.schemas.conversation import PartyOut
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind


class CreateMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: int | None = Field(None, alias="senderId")
    receiver_id: int | None = Field(None, alias="receiverId")
    content: str = ""
    client_msg_id: UUID | None = Field(None, alias="clientMsgId")


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    conversation_kind: ConversationKind
    application_id: UUID | None = None
    booking_id: UUID | None = None
    sender: PartyOut
    receiver: PartyOut
    content: str
    read: bool = False
    client_msg_id: UUID
    created_at: datetime

    @classmethod
    def from_entity(cls, msg: Message) -> MessageResponse:
        return cls(
            id=msg.id,
            conversation_id=msg.conversation_id,
            conversation_kind=msg.conversation_kind,
            application_id=msg.application_id,
            booking_id=msg.booking_id,
            sender=PartyOut.from_entity(msg.sender),
            receiver=PartyOut.from_entity(msg.receiver),
            content=msg.content,
            read=msg.read,
            client_msg_id=msg.client_msg_id,
            created_at=msg.created_at,
        )

    def to_entity(self) -> Message:
        return Message(
            id=self.id,
            conversation_id=self.conversation_id,
            conversation_kind=self.conversation_kind,
            sender=self.sender.to_entity(),
            receiver=self.receiver.to_entity(),
            content=self.content,
            client_msg_id=self.client_msg_id,
            created_at=self.created_at,
            read=self.read,
        )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class MarkReadResponse(BaseModel):
    updated: int
