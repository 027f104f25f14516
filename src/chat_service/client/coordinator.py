from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Literal, Protocol
from uuid import UUID

from chat_service.application.exceptions import DeliveryError, TransportError, ValidationError
from chat_service.application.policies.messages import resolve_receiver, validate_content
from chat_service.client.view_state import ConversationViewState
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.infrastructure.ws.protocol import SendMessagePayload

logger = logging.getLogger(__name__)


class MessageCreator(Protocol):
    async def create_message(
        self,
        *,
        sender_id: int | None,
        receiver_id: int | None,
        content: str,
        conversation_id: UUID,
        kind: ConversationKind,
        client_msg_id: UUID | None = None,
    ) -> Message: ...


class MessageEmitter(Protocol):
    @property
    def connected(self) -> bool: ...

    async def emit_message(self, payload: dict) -> None: ...


@dataclass(frozen=True, slots=True)
class SendOutcome:
    client_msg_id: UUID
    channel: Literal["realtime", "http"]
    message: Message | None = None


class DeliveryCoordinator:
    """Sends the draft over the realtime channel, or over HTTP when it is down.

    Exactly one channel stores each send: a failed emit is retried over HTTP
    with the same ``clientMsgId``, which the server de-duplicates.
    """

    def __init__(
        self,
        view: ConversationViewState,
        gateway: MessageCreator,
        transport: MessageEmitter,
    ) -> None:
        self.view = view
        self.gateway = gateway
        self.transport = transport

    async def send(self, text: str | None = None) -> SendOutcome:
        view = self.view
        content = view.draft if text is None else text
        view.draft = ""

        conversation = view.selected
        if conversation is None:
            raise ValidationError("No conversation selected")
        content = validate_content(content)
        sender_id = view.current_user_id
        receiver = resolve_receiver(conversation, sender_id)

        client_msg_id = uuid.uuid4()
        payload = SendMessagePayload(
            sender_id=sender_id,
            receiver_id=receiver.id,
            content=content,
            type=conversation.kind,
            conversation_type=conversation.kind,
            application_id=conversation.id if conversation.kind == ConversationKind.JOB else None,
            booking_id=conversation.id if conversation.kind == ConversationKind.SERVICE else None,
            client_msg_id=client_msg_id,
        )

        if self.transport.connected:
            try:
                await self.transport.emit_message(payload.to_wire())
                return SendOutcome(client_msg_id=client_msg_id, channel="realtime")
            except TransportError as exc:
                logger.info("Realtime send failed, using HTTP: %s", exc.detail)

        try:
            message = await self.gateway.create_message(
                sender_id=sender_id,
                receiver_id=receiver.id,
                content=content,
                conversation_id=conversation.id,
                kind=conversation.kind,
                client_msg_id=client_msg_id,
            )
        except DeliveryError as exc:
            view.notice = exc.detail
            raise
        view.receive(message)
        return SendOutcome(client_msg_id=client_msg_id, channel="http", message=message)
