"""Asyncio client for the chat service: HTTP gateway, realtime transport and view state."""
from chat_service.client.coordinator import DeliveryCoordinator, SendOutcome
from chat_service.client.gateway import ConversationList, HttpMessageGateway
from chat_service.client.transport import RealtimeTransport
from chat_service.client.view_state import ConversationViewState

__all__ = [
    "ConversationList",
    "ConversationViewState",
    "DeliveryCoordinator",
    "HttpMessageGateway",
    "RealtimeTransport",
    "SendOutcome",
]
