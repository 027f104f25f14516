"""Send-time checks shared by the server and the client coordinator."""
from __future__ import annotations

from chat_service.application.exceptions import ValidationError
from chat_service.domain.entities.conversation import Conversation
from chat_service.domain.entities.party import Party


def validate_content(content: str | None, *, max_length: int | None = None) -> str:
    """Return the trimmed content or raise ValidationError."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Message content must not be empty")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"Message content exceeds {max_length} characters")
    return text


def resolve_receiver(conversation: Conversation, sender_id: int | None) -> Party:
    """The party opposite to the sender's role in the conversation.

    Job: worker <-> client. Service: provider <-> customer.
    """
    receiver = conversation.other_party(sender_id)
    if receiver is None:
        raise ValidationError("Sender is not a participant of this conversation")
    if not receiver.resolved:
        raise ValidationError("Receiver could not be resolved")
    return receiver
