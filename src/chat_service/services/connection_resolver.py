"""Merge approved job applications and service bookings into one conversation list."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from uuid import UUID

from chat_service.application.dto.conversation import ResolvedConversations
from chat_service.application.repositories.relationship import RelationshipReader
from chat_service.domain.entities.conversation import (
    Conversation,
    JobConversation,
    ServiceConversation,
)
from chat_service.domain.entities.relationship import JobApplication, ServiceBooking
from chat_service.domain.value_objects.enums import ConversationKind, RelationshipStatus

logger = logging.getLogger(__name__)

Relationship = JobApplication | ServiceBooking


async def resolve_conversations(
    viewer_id: int,
    reader: RelationshipReader,
) -> ResolvedConversations:
    """Return every conversation visible to ``viewer_id``, newest first.

    The four sources are queried concurrently; a failing source is reported in
    ``failed_sources`` and does not abort the others.
    """
    approved = RelationshipStatus.APPROVED
    sources: dict[str, Awaitable[Sequence[Relationship]]] = {
        "job:worker": reader.list_worker_applications(viewer_id, status=approved),
        "job:client": reader.list_client_applications(viewer_id, status=approved),
        "service:provider": reader.list_provider_bookings(viewer_id, status=approved),
        "service:customer": reader.list_customer_bookings(viewer_id, status=approved),
    }
    results = await asyncio.gather(*sources.values(), return_exceptions=True)

    merged: dict[tuple[ConversationKind, UUID], Conversation] = {}
    failed: list[str] = []
    for name, result in zip(sources, results):
        if isinstance(result, Exception):
            logger.warning(
                "Relationship source %s failed for user %s: %s", name, viewer_id, result,
            )
            failed.append(name)
            continue
        if isinstance(result, BaseException):
            raise result
        for record in result:
            conversation = _to_conversation(record, viewer_id)
            if conversation is not None:
                merged.setdefault((conversation.kind, conversation.id), conversation)

    if len(failed) == len(sources):
        logger.error("All relationship sources failed for user %s", viewer_id)

    ordered = sorted(merged.values(), key=lambda c: c.created_at, reverse=True)
    return ResolvedConversations(
        conversations=ordered,
        failed_sources=failed,
        attempted_sources=len(sources),
    )


def _to_conversation(record: Relationship, viewer_id: int) -> Conversation | None:
    # A source may ignore the status filter.
    if not record.is_approved:
        return None
    if isinstance(record, JobApplication):
        return JobConversation.from_application(record, viewer_id)
    return ServiceConversation.from_booking(record, viewer_id)
