"""WebSocket client with silent reconnect and room re-join."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable
from uuid import UUID

import websockets
from pydantic import ValidationError as PydanticValidationError

from chat_service.api.v1.schemas.message import MessageResponse
from chat_service.application.exceptions import AppError, DeliveryError, TransportError
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.infrastructure.ws import protocol

logger = logging.getLogger(__name__)

AUTH_FAILED_CLOSE_CODE = 4001

MessageCallback = Callable[[Message], None]
ErrorCallback = Callable[[AppError], None]


class RealtimeTransport:
    """Owns one WebSocket session to ``/ws/chat``.

    ``connect()`` returns immediately; the socket is opened by a background
    task that reconnects with capped exponential backoff until
    ``disconnect()`` is called or the server rejects the token.
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        connect: Callable[[str], Any] = websockets.connect,
        backoff_initial: float = 0.5,
        backoff_max: float = 30.0,
    ) -> None:
        self._url = url
        self._token = token
        self._connect = connect
        self._backoff_initial = backoff_initial
        self._backoff_max = backoff_max
        self._ws: Any = None
        self._task: asyncio.Task[None] | None = None
        self._rooms: dict[UUID, ConversationKind | None] = {}
        self._message_callbacks: list[MessageCallback] = []
        self._error_callbacks: list[ErrorCallback] = []

    @property
    def connected(self) -> bool:
        return self._ws is not None

    @property
    def rooms(self) -> frozenset[UUID]:
        return frozenset(self._rooms)

    def on_message(self, callback: MessageCallback) -> None:
        self._message_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def connect(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run(), name="chat-transport")

    async def disconnect(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()

    async def join(self, conversation_id: UUID, kind: ConversationKind | None = None) -> None:
        if conversation_id in self._rooms:
            return
        self._rooms[conversation_id] = kind
        if self.connected:
            await self._send_quietly(protocol.JOIN_CONVERSATION, _room_data(conversation_id, kind))

    async def leave(self, conversation_id: UUID) -> None:
        if conversation_id not in self._rooms:
            return
        del self._rooms[conversation_id]
        if self.connected:
            await self._send_quietly(
                protocol.LEAVE_CONVERSATION, {"conversationId": str(conversation_id)},
            )

    async def emit_message(self, payload: dict[str, Any]) -> None:
        """Send a ``send_message`` frame. Raises TransportError if the socket is not usable."""
        await self.emit(protocol.SEND_MESSAGE, payload)

    async def emit(self, event_type: str, data: dict[str, Any]) -> None:
        ws = self._ws
        if ws is None:
            raise TransportError("Realtime channel is not connected")
        try:
            await ws.send(json.dumps({"type": event_type, "data": data}))
        except Exception as exc:
            raise TransportError(f"Realtime send failed: {exc}") from exc

    async def _send_quietly(self, event_type: str, data: dict[str, Any]) -> None:
        try:
            await self.emit(event_type, data)
        except TransportError:
            logger.debug("Deferred %s until reconnect", event_type)

    async def _run(self) -> None:
        attempt = 0
        uri = f"{self._url}?token={self._token}"
        while True:
            try:
                async with self._connect(uri) as ws:
                    self._ws = ws
                    attempt = 0
                    logger.info("Realtime channel connected")
                    for room, kind in list(self._rooms.items()):
                        await self.emit(protocol.JOIN_CONVERSATION, _room_data(room, kind))
                    async for raw in ws:
                        self._dispatch(raw)
            except asyncio.CancelledError:
                raise
            except websockets.ConnectionClosed as exc:
                if exc.rcvd is not None and exc.rcvd.code == AUTH_FAILED_CLOSE_CODE:
                    self._ws = None
                    logger.error("Realtime channel rejected the token")
                    self._report(TransportError("Authentication failed"))
                    return
                logger.info("Realtime channel closed: %s", exc)
            except Exception as exc:
                logger.info("Realtime channel unavailable: %s", exc)
            finally:
                self._ws = None

            delay = min(self._backoff_max, self._backoff_initial * (2 ** attempt))
            attempt += 1
            await asyncio.sleep(delay)

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            frame = json.loads(raw)
            event_type = frame["type"]
            data = frame.get("data") or {}
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Ignoring malformed realtime frame")
            return

        if event_type == protocol.RECEIVE_MESSAGE:
            try:
                message = MessageResponse.model_validate(data).to_entity()
            except PydanticValidationError:
                logger.warning("Ignoring malformed receive_message frame")
                return
            for callback in list(self._message_callbacks):
                try:
                    callback(message)
                except Exception:
                    logger.exception("Message callback failed")
        elif event_type == protocol.ERROR:
            detail = data.get("detail") or data.get("code") or "Realtime error"
            if data.get("clientMsgId"):
                self._report(DeliveryError(detail))
            else:
                self._report(TransportError(detail))

    def _report(self, exc: AppError) -> None:
        for callback in list(self._error_callbacks):
            try:
                callback(exc)
            except Exception:
                logger.exception("Error callback failed")


def _room_data(conversation_id: UUID, kind: ConversationKind | None) -> dict[str, Any]:
    data: dict[str, Any] = {"conversationId": str(conversation_id)}
    if kind is not None:
        data["conversationType"] = kind.value
    return data
