from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from chat_service.api.deps import UoWFactory, get_uow_factory, get_verifier
from chat_service.api.v1.schemas.message import MessageResponse
from chat_service.application.dto.message import CreateMessageDTO
from chat_service.application.dto.principal import Principal
from chat_service.application.exceptions import (
    AppError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from chat_service.config import settings
from chat_service.infrastructure.ws import protocol
from chat_service.infrastructure.ws.manager import ConnectionManager
from chat_service.infrastructure.ws.protocol import (
    RoomRequest,
    SendMessagePayload,
    WsInbound,
)
from chat_service.services import conversation_service, message_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


def _error_code(exc: AppError) -> str:
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, ForbiddenError):
        return "forbidden"
    if isinstance(exc, ValidationError):
        return "validation_error"
    return "error"


async def _authenticate(token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


class _Session:
    """State of one WebSocket session."""

    def __init__(
        self,
        ws: WebSocket,
        session_id: str,
        principal: Principal,
        manager: ConnectionManager,
        uow_factory: UoWFactory,
    ) -> None:
        self.ws = ws
        self.session_id = session_id
        self.principal = principal
        self.manager = manager
        self.uow_factory = uow_factory
        self.publisher = ws.app.state.room_publisher

    async def send(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        await self.manager.send_to_session(self.session_id, event_type, data or {})

    async def error(self, code: str, detail: str, client_msg_id: str | None = None) -> None:
        data: dict[str, Any] = {"code": code, "detail": detail}
        if client_msg_id:
            data["clientMsgId"] = client_msg_id
        await self.send(protocol.ERROR, data)

    async def handle(self, msg: WsInbound) -> None:
        if msg.type == protocol.PING:
            await self.send(protocol.PONG)
        elif msg.type == protocol.JOIN_CONVERSATION:
            await self._join(msg.data)
        elif msg.type == protocol.LEAVE_CONVERSATION:
            await self._leave(msg.data)
        elif msg.type == protocol.SEND_MESSAGE:
            await self._send_message(msg.data)
        elif msg.type == protocol.MARK_READ:
            await self._mark_read(msg.data)
        else:
            await self.error("unknown_type", f"Unsupported message type: {msg.type}")

    async def _join(self, data: dict[str, Any]) -> None:
        try:
            req = RoomRequest.model_validate(data)
        except PydanticValidationError as exc:
            await self.error("invalid_payload", str(exc))
            return

        try:
            async with self.uow_factory() as uow:
                conv = await conversation_service.get_conversation(
                    req.conversation_id, req.conversation_type, self.principal, uow,
                )
        except AppError as exc:
            await self.error(_error_code(exc), exc.detail)
            return

        if self.manager.join(self.session_id, conv.id):
            logger.debug("Session %s joined room %s", self.session_id, conv.id)
        await self.send(
            protocol.JOINED,
            {"conversationId": str(conv.id), "conversationType": conv.kind.value},
        )

    async def _leave(self, data: dict[str, Any]) -> None:
        try:
            req = RoomRequest.model_validate(data)
        except PydanticValidationError as exc:
            await self.error("invalid_payload", str(exc))
            return
        self.manager.leave(self.session_id, req.conversation_id)
        await self.send(protocol.LEFT, {"conversationId": str(req.conversation_id)})

    async def _send_message(self, data: dict[str, Any]) -> None:
        client_msg_id = data.get("clientMsgId") if isinstance(data.get("clientMsgId"), str) else None
        try:
            payload = SendMessagePayload.model_validate(data)
        except PydanticValidationError as exc:
            await self.error("invalid_payload", str(exc), client_msg_id)
            return

        dto = CreateMessageDTO(
            sender_id=payload.sender_id,
            receiver_id=payload.receiver_id,
            content=payload.content,
            conversation_id=payload.conversation_id,
            conversation_kind=payload.type,
            client_msg_id=payload.client_msg_id,
        )
        try:
            async with self.uow_factory() as uow:
                stored, created = await message_service.create_message(
                    dto, self.principal, uow, max_length=settings.MESSAGE_MAX_LENGTH or None,
                )
        except AppError as exc:
            await self.error(_error_code(exc), exc.detail, client_msg_id)
            return

        self.manager.join(self.session_id, stored.conversation_id)
        wire = MessageResponse.from_entity(stored).to_wire()
        if created:
            try:
                await self.publisher.publish_to_room(
                    stored.conversation_id, protocol.RECEIVE_MESSAGE, wire,
                )
                return
            except Exception:
                logger.exception("Room fan-out failed for message %s", stored.id)
        await self.send(protocol.RECEIVE_MESSAGE, wire)

    async def _mark_read(self, data: dict[str, Any]) -> None:
        try:
            req = RoomRequest.model_validate(data)
        except PydanticValidationError as exc:
            await self.error("invalid_payload", str(exc))
            return

        try:
            async with self.uow_factory() as uow:
                kind = req.conversation_type
                if kind is None:
                    conv = await conversation_service.get_conversation(
                        req.conversation_id, None, self.principal, uow,
                    )
                    kind = conv.kind
                await message_service.mark_read(req.conversation_id, kind, self.principal, uow)
        except AppError as exc:
            await self.error(_error_code(exc), exc.detail)


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
    uow_factory: UoWFactory = Depends(get_uow_factory),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    manager: ConnectionManager = websocket.app.state.ws_manager
    session_id = await manager.connect(websocket)
    session = _Session(websocket, session_id, principal, manager, uow_factory)

    heartbeat_task = asyncio.create_task(
        _heartbeat(session), name=f"ws-heartbeat-{session_id}",
    )
    try:
        await _read_loop(session)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.principal_key)
    finally:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(session_id)


async def _heartbeat(session: _Session) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        await session.send(protocol.HEARTBEAT)


async def _read_loop(session: _Session) -> None:
    while True:
        raw = await session.ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PydanticValidationError:
            await session.error("invalid_payload", "Frame is not a {type, data} object")
            continue
        await session.handle(msg)
