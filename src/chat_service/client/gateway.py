"""HTTP client for the chat REST API."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chat_service.api.v1.schemas.conversation import ConversationListResponse
from chat_service.api.v1.schemas.message import MessageResponse
from chat_service.application.exceptions import (
    DeliveryError,
    GatewayError,
    ResolutionError,
    ValidationError,
)
from chat_service.application.policies.messages import validate_content
from chat_service.domain.entities.conversation import Conversation
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind

logger = logging.getLogger(__name__)

_API_PREFIX = "/api/v1/chat"

_message_list = TypeAdapter(list[MessageResponse])


@dataclass(frozen=True, slots=True)
class ConversationList:
    conversations: list[Conversation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None


class HttpMessageGateway:
    """Reads and writes conversations through the REST API.

    The bearer token is sent on every call. Pass ``client`` to share a
    connection pool or to inject a test transport.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(
            method, f"{_API_PREFIX}{path}", headers=self._headers, **kwargs,
        )
        response.raise_for_status()
        return response

    async def list_conversations(self) -> ConversationList:
        """Raises ResolutionError when the list cannot be fetched at all."""
        try:
            response = await self._request("GET", "/conversations")
            body = ConversationListResponse.model_validate(response.json())
        except (httpx.HTTPError, PydanticValidationError, ValueError) as exc:
            logger.warning("Conversation list request failed: %s", exc)
            raise ResolutionError("Conversations could not be loaded") from exc
        return ConversationList(
            conversations=[item.to_entity() for item in body.items],
            warnings=list(body.warnings),
            error=body.error,
        )

    async def load_history(self, conversation_id: UUID, kind: ConversationKind) -> list[Message]:
        try:
            response = await self._request(
                "GET", f"/conversations/{kind.value}/{conversation_id}/messages",
            )
            items = _message_list.validate_python(response.json())
        except (httpx.HTTPError, PydanticValidationError, ValueError) as exc:
            logger.warning("History request for %s failed: %s", conversation_id, exc)
            raise GatewayError("Messages could not be loaded") from exc
        return [item.to_entity() for item in items]

    async def create_message(
        self,
        *,
        sender_id: int | None,
        receiver_id: int | None,
        content: str,
        conversation_id: UUID,
        kind: ConversationKind,
        client_msg_id: UUID | None = None,
    ) -> Message:
        """Synchronous create. Raises ValidationError before any request, DeliveryError after."""
        if sender_id is None or receiver_id is None:
            raise ValidationError("Sender and receiver are required")
        text = validate_content(content)

        body = {
            "senderId": sender_id,
            "receiverId": receiver_id,
            "content": text,
            "clientMsgId": str(client_msg_id or uuid.uuid4()),
        }
        try:
            response = await self._request(
                "POST", f"/conversations/{kind.value}/{conversation_id}/messages", json=body,
            )
            return MessageResponse.model_validate(response.json()).to_entity()
        except httpx.HTTPStatusError as exc:
            detail = _detail_of(exc.response)
            logger.warning("Message delivery rejected (%s): %s", exc.response.status_code, detail)
            raise DeliveryError(detail or "Message could not be delivered") from exc
        except (httpx.HTTPError, PydanticValidationError, ValueError) as exc:
            logger.warning("Message delivery failed: %s", exc)
            raise DeliveryError("Message could not be delivered") from exc

    async def mark_read(self, conversation_id: UUID, kind: ConversationKind) -> int:
        try:
            response = await self._request(
                "POST", f"/conversations/{kind.value}/{conversation_id}/read",
            )
            return int(response.json()["updated"])
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            raise GatewayError("Conversation could not be marked as read") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _detail_of(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    detail = body.get("detail") if isinstance(body, dict) else None
    return detail if isinstance(detail, str) else ""
