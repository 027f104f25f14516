from __future__ import annotations

import uuid

import pytest

from chat_service.application.exceptions import ForbiddenError, NotFoundError
from chat_service.domain.entities.conversation import JobConversation, ServiceConversation
from chat_service.domain.value_objects.enums import ConversationKind
from chat_service.services import conversation_service
from tests.conftest import CLIENT, WORKER, FakeUoW, make_application, make_booking


@pytest.mark.asyncio
async def test_get_conversation_for_participant(worker_principal):
    uow = FakeUoW()
    app = make_application()
    uow.relationships.applications.append(app)

    conv = await conversation_service.get_conversation(
        app.id, ConversationKind.JOB, worker_principal, uow,
    )

    assert isinstance(conv, JobConversation)
    assert conv.counterparty == CLIENT


@pytest.mark.asyncio
async def test_get_conversation_without_kind_searches_both_spaces(worker_principal):
    uow = FakeUoW()
    booking = make_booking(customer=WORKER)
    uow.relationships.bookings.append(booking)

    conv = await conversation_service.get_conversation(booking.id, None, worker_principal, uow)

    assert isinstance(conv, ServiceConversation)
    assert conv.kind == ConversationKind.SERVICE


@pytest.mark.asyncio
async def test_get_conversation_not_found(worker_principal):
    with pytest.raises(NotFoundError):
        await conversation_service.get_conversation(
            uuid.uuid4(), ConversationKind.JOB, worker_principal, FakeUoW(),
        )


@pytest.mark.asyncio
async def test_get_conversation_forbidden_for_outsider(stranger_principal):
    uow = FakeUoW()
    app = make_application()
    uow.relationships.applications.append(app)

    with pytest.raises(ForbiddenError):
        await conversation_service.get_conversation(
            app.id, ConversationKind.JOB, stranger_principal, uow,
        )


@pytest.mark.asyncio
async def test_list_user_conversations_uses_principal_id(client_principal):
    uow = FakeUoW()
    app = make_application()
    uow.relationships.applications.append(app)

    resolved = await conversation_service.list_user_conversations(
        client_principal, uow.relationships,
    )

    assert [c.id for c in resolved.conversations] == [app.id]
    assert resolved.conversations[0].counterparty == WORKER
