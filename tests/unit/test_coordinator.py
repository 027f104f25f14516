from __future__ import annotations

import uuid

import pytest

from chat_service.application.exceptions import DeliveryError, ValidationError
from chat_service.client.coordinator import DeliveryCoordinator
from chat_service.client.view_state import ConversationViewState
from chat_service.domain.entities.conversation import JobConversation, ServiceConversation
from chat_service.domain.entities.party import Party
from chat_service.domain.value_objects.enums import ConversationKind
from tests.conftest import (
    CLIENT,
    CUSTOMER,
    PROVIDER,
    WORKER,
    make_application,
    make_booking,
)
from tests.unit.client_fakes import FakeGateway, FakeTransport


@pytest.fixture
def gateway() -> FakeGateway:
    gw = FakeGateway()
    gw.parties = {p.id: p for p in (WORKER, CLIENT, PROVIDER, CUSTOMER)}
    return gw


async def _setup(gateway, *, connected: bool, user=WORKER, conversation=None):
    transport = FakeTransport(connected=connected)
    view = ConversationViewState(gateway, transport, user.id)
    if conversation is not None:
        await view.select(conversation)
    return view, transport, DeliveryCoordinator(view, gateway, transport)


@pytest.mark.asyncio
async def test_connected_send_emits_only(gateway):
    conv = JobConversation.from_application(make_application(), WORKER.id)
    view, transport, coordinator = await _setup(gateway, connected=True, conversation=conv)
    view.draft = "hello"

    outcome = await coordinator.send()

    assert outcome.channel == "realtime"
    assert view.draft == ""
    assert gateway.created == []
    assert view.messages == []
    assert transport.emitted == [{
        "senderId": WORKER.id,
        "receiverId": CLIENT.id,
        "content": "hello",
        "type": "job",
        "conversationType": "job",
        "applicationId": str(conv.id),
        "clientMsgId": str(outcome.client_msg_id),
    }]


@pytest.mark.asyncio
async def test_disconnected_send_uses_http_and_appends_result(gateway):
    conv = JobConversation.from_application(make_application(), CLIENT.id)
    view, transport, coordinator = await _setup(
        gateway, connected=False, user=CLIENT, conversation=conv,
    )

    outcome = await coordinator.send("hi there")

    assert outcome.channel == "http"
    assert transport.emitted == []
    assert len(gateway.created) == 1
    assert gateway.created[0]["receiver_id"] == WORKER.id
    assert gateway.created[0]["client_msg_id"] == outcome.client_msg_id
    assert view.messages == [outcome.message]


@pytest.mark.asyncio
async def test_failed_emit_falls_back_with_same_client_msg_id(gateway):
    conv = ServiceConversation.from_booking(make_booking(), PROVIDER.id)
    view, transport, coordinator = await _setup(
        gateway, connected=True, user=PROVIDER, conversation=conv,
    )
    transport.fail_emit = True

    outcome = await coordinator.send("on my way")

    assert outcome.channel == "http"
    assert len(gateway.created) == 1
    assert gateway.created[0]["client_msg_id"] == outcome.client_msg_id
    assert gateway.created[0]["receiver_id"] == CUSTOMER.id
    assert gateway.created[0]["kind"] == ConversationKind.SERVICE


@pytest.mark.asyncio
async def test_http_failure_sets_notice_and_is_not_retried(gateway):
    conv = JobConversation.from_application(make_application(), WORKER.id)
    view, _, coordinator = await _setup(gateway, connected=False, conversation=conv)
    gateway.fail_create = True

    with pytest.raises(DeliveryError):
        await coordinator.send("hello")

    assert len(gateway.created) == 1
    assert view.notice == "Message could not be delivered"
    assert view.messages == []


@pytest.mark.asyncio
async def test_no_selection_is_a_validation_error(gateway):
    view, transport, coordinator = await _setup(gateway, connected=True)
    view.draft = "hello"

    with pytest.raises(ValidationError):
        await coordinator.send()

    assert view.draft == ""
    assert transport.emitted == []
    assert gateway.created == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   "])
async def test_blank_content_is_a_validation_error(gateway, text):
    conv = JobConversation.from_application(make_application(), WORKER.id)
    _, transport, coordinator = await _setup(gateway, connected=True, conversation=conv)

    with pytest.raises(ValidationError):
        await coordinator.send(text)

    assert transport.emitted == []
    assert gateway.created == []


@pytest.mark.asyncio
async def test_unresolvable_receiver_is_a_validation_error(gateway):
    app = make_application(client=Party(id=None, display_name="Unknown"))
    conv = JobConversation.from_application(app, WORKER.id)
    _, transport, coordinator = await _setup(gateway, connected=False, conversation=conv)

    with pytest.raises(ValidationError):
        await coordinator.send("hello")

    assert gateway.created == []


@pytest.mark.asyncio
async def test_each_send_gets_a_fresh_client_msg_id(gateway):
    conv = JobConversation.from_application(make_application(), WORKER.id)
    _, _, coordinator = await _setup(gateway, connected=True, conversation=conv)

    first = await coordinator.send("one")
    second = await coordinator.send("two")

    assert isinstance(first.client_msg_id, uuid.UUID)
    assert first.client_msg_id != second.client_msg_id
