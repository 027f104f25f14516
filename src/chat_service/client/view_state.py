"""Client-side state of the chat screen."""
from __future__ import annotations

import logging
from typing import Callable, Protocol
from uuid import UUID

from chat_service.application.exceptions import AppError, GatewayError, ResolutionError
from chat_service.client.gateway import ConversationList
from chat_service.client.transport import ErrorCallback, MessageCallback
from chat_service.domain.entities.conversation import Conversation
from chat_service.domain.entities.message import Message
from chat_service.domain.value_objects.enums import ConversationKind

logger = logging.getLogger(__name__)

ScrollListener = Callable[[int], None]


class ViewGateway(Protocol):
    async def list_conversations(self) -> ConversationList: ...

    async def load_history(self, conversation_id: UUID, kind: ConversationKind) -> list[Message]: ...

    async def mark_read(self, conversation_id: UUID, kind: ConversationKind) -> int: ...


class ViewTransport(Protocol):
    @property
    def connected(self) -> bool: ...

    def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def join(self, conversation_id: UUID, kind: ConversationKind | None = None) -> None: ...

    async def leave(self, conversation_id: UUID) -> None: ...

    def on_message(self, callback: MessageCallback) -> None: ...

    def on_error(self, callback: ErrorCallback) -> None: ...


class ConversationViewState:
    """Conversation list, current selection and its message timeline.

    History loads are tagged with a selection counter so a response that
    arrives after the user switched conversations is dropped. Live messages
    received while history is loading are kept after the loaded history.
    """

    def __init__(
        self,
        gateway: ViewGateway,
        transport: ViewTransport,
        current_user_id: int,
        *,
        leave_previous: bool = False,
    ) -> None:
        self.gateway = gateway
        self.transport = transport
        self.current_user_id = current_user_id
        self.leave_previous = leave_previous

        self.conversations: list[Conversation] = []
        self.selected: Conversation | None = None
        self.messages: list[Message] = []
        self.draft = ""
        self.notice: str | None = None
        self.warnings: list[str] = []
        self.error: str | None = None
        self.loading = False

        self._selection = 0
        self._scroll_listeners: list[ScrollListener] = []

    def on_scroll(self, listener: ScrollListener) -> None:
        """``listener(length)`` runs whenever the message list grows or shrinks."""
        self._scroll_listeners.append(listener)

    async def mount(self) -> None:
        self.transport.on_message(self.receive)
        self.transport.on_error(self._on_transport_error)
        self.transport.connect()
        await self.load_conversations()
        if self.selected is None and self.conversations:
            await self.select(self.conversations[0])

    async def unmount(self) -> None:
        await self.transport.disconnect()

    async def load_conversations(self) -> None:
        try:
            result = await self.gateway.list_conversations()
        except ResolutionError as exc:
            self.conversations = []
            self.warnings = []
            self.error = exc.detail
            return
        self.conversations = list(result.conversations)
        self.warnings = list(result.warnings)
        self.error = result.error

    async def select(self, conversation: Conversation) -> None:
        previous = self.selected
        self._selection += 1
        selection = self._selection

        self.selected = conversation
        self.notice = None
        self._set_messages([])
        self.loading = True

        if self.leave_previous and previous is not None and previous.id != conversation.id:
            await self.transport.leave(previous.id)
        await self.transport.join(conversation.id, conversation.kind)

        try:
            history = await self.gateway.load_history(conversation.id, conversation.kind)
        except GatewayError as exc:
            if selection == self._selection:
                self.loading = False
                self.notice = exc.detail
            return

        if selection != self._selection:
            logger.debug("Discarding stale history for %s", conversation.id)
            return

        known = {m.id for m in history}
        live = [m for m in self.messages if m.id not in known]
        self.loading = False
        self._set_messages([*history, *live])

    def receive(self, message: Message) -> None:
        """Append a live message if it belongs to the selected conversation."""
        selected = self.selected
        if selected is None:
            return
        if message.conversation_id != selected.id or message.conversation_kind != selected.kind:
            return
        if any(m.id == message.id for m in self.messages):
            return
        self._set_messages([*self.messages, message])

    async def mark_read(self) -> int:
        if self.selected is None:
            return 0
        try:
            return await self.gateway.mark_read(self.selected.id, self.selected.kind)
        except GatewayError as exc:
            self.notice = exc.detail
            return 0

    def _on_transport_error(self, exc: AppError) -> None:
        self.notice = exc.detail

    def _set_messages(self, messages: list[Message]) -> None:
        changed = len(messages) != len(self.messages)
        self.messages = messages
        if changed:
            for listener in list(self._scroll_listeners):
                listener(len(messages))
