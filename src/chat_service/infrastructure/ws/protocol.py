"""WebSocket message envelope models and event names."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chat_service.domain.value_objects.enums import ConversationKind

# Client -> Server
JOIN_CONVERSATION = "join_conversation"
LEAVE_CONVERSATION = "leave_conversation"
SEND_MESSAGE = "send_message"
MARK_READ = "mark_read"
PING = "ping"

# Server -> Client
RECEIVE_MESSAGE = "receive_message"
JOINED = "joined"
LEFT = "left"
ERROR = "error"
PONG = "pong"
HEARTBEAT = "heartbeat"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: dict[str, Any] = {}


class RoomRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: UUID = Field(alias="conversationId")
    conversation_type: ConversationKind | None = Field(None, alias="conversationType")


class SendMessagePayload(BaseModel):
    """``send_message`` data.

    Carries either ``applicationId`` with ``type="job"`` or ``bookingId`` with
    ``type="service"``.
    """

    model_config = ConfigDict(populate_by_name=True)

    sender_id: int | None = Field(None, alias="senderId")
    receiver_id: int | None = Field(None, alias="receiverId")
    content: str = ""
    type: ConversationKind
    conversation_type: ConversationKind | None = Field(None, alias="conversationType")
    application_id: UUID | None = Field(None, alias="applicationId")
    booking_id: UUID | None = Field(None, alias="bookingId")
    client_msg_id: UUID | None = Field(None, alias="clientMsgId")

    @model_validator(mode="after")
    def _check_reference(self) -> SendMessagePayload:
        if self.conversation_type is not None and self.conversation_type != self.type:
            raise ValueError("conversationType does not match type")
        if self.type == ConversationKind.JOB and self.application_id is None:
            raise ValueError("applicationId is required for job messages")
        if self.type == ConversationKind.SERVICE and self.booking_id is None:
            raise ValueError("bookingId is required for service messages")
        return self

    @property
    def conversation_id(self) -> UUID:
        if self.type == ConversationKind.JOB:
            return self.application_id  # type: ignore[return-value]
        return self.booking_id  # type: ignore[return-value]

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
