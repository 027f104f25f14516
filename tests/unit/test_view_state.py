from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from chat_service.application.exceptions import DeliveryError, ResolutionError
from chat_service.client.gateway import ConversationList
from chat_service.client.view_state import ConversationViewState
from chat_service.domain.entities.conversation import JobConversation, ServiceConversation
from chat_service.domain.value_objects.enums import ConversationKind
from tests.conftest import (
    BASE_TIME,
    CLIENT,
    WORKER,
    make_application,
    make_booking,
    make_message,
)
from tests.unit.client_fakes import FakeGateway, FakeTransport


def _job(**kw) -> JobConversation:
    return JobConversation.from_application(make_application(**kw), WORKER.id)


def _service(**kw) -> ServiceConversation:
    return ServiceConversation.from_booking(make_booking(customer=WORKER, **kw), WORKER.id)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def view(gateway, transport) -> ConversationViewState:
    return ConversationViewState(gateway, transport, WORKER.id)


@pytest.mark.asyncio
async def test_mount_connects_and_selects_newest_conversation(view, gateway, transport):
    newest = _job(created_at=BASE_TIME + timedelta(days=1))
    older = _service()
    gateway.conversations = ConversationList(conversations=[newest, older])
    gateway.history[newest.id] = [make_message(conversation_id=newest.id)]

    await view.mount()

    assert transport.started
    assert view.selected == newest
    assert transport.joined == [newest.id]
    assert len(view.messages) == 1
    assert view.loading is False


@pytest.mark.asyncio
async def test_mount_without_conversations_selects_nothing(view, transport):
    await view.mount()

    assert view.selected is None
    assert transport.joined == []


@pytest.mark.asyncio
async def test_partial_list_keeps_warnings(view, gateway):
    conv = _job()
    gateway.conversations = ConversationList(conversations=[conv], warnings=["job:client failed"])

    await view.load_conversations()

    assert view.conversations == [conv]
    assert view.warnings == ["job:client failed"]
    assert view.error is None


@pytest.mark.asyncio
async def test_resolution_failure_sets_error(view, gateway):
    gateway.list_error = ResolutionError("Conversations could not be loaded")

    await view.load_conversations()

    assert view.conversations == []
    assert view.error == "Conversations could not be loaded"


@pytest.mark.asyncio
async def test_select_clears_messages_and_loads_history(view, gateway):
    a, b = _job(), _job()
    gateway.history[a.id] = [make_message(conversation_id=a.id, content="in a")]
    gateway.history[b.id] = [make_message(conversation_id=b.id, content="in b")]

    await view.select(a)
    await view.select(b)

    assert [m.content for m in view.messages] == ["in b"]


@pytest.mark.asyncio
async def test_leave_previous_room_when_configured(gateway, transport):
    view = ConversationViewState(gateway, transport, WORKER.id, leave_previous=True)
    a, b = _job(), _service()

    await view.select(a)
    await view.select(b)

    assert transport.left == [a.id]
    assert transport.joined == [a.id, b.id]


@pytest.mark.asyncio
async def test_stale_history_is_discarded(view, gateway):
    slow, fast = _job(), _job()
    gateway.history[slow.id] = [make_message(conversation_id=slow.id, content="stale")]
    gateway.history[fast.id] = [make_message(conversation_id=fast.id, content="fresh")]
    gate = asyncio.Event()
    gateway.history_gates[slow.id] = gate

    pending = asyncio.create_task(view.select(slow))
    await asyncio.sleep(0)
    await view.select(fast)
    gate.set()
    await pending

    assert view.selected == fast
    assert [m.content for m in view.messages] == ["fresh"]


@pytest.mark.asyncio
async def test_live_message_during_history_load_is_kept_after_history(view, gateway, transport):
    conv = _job()
    old = make_message(conversation_id=conv.id, content="old")
    live = make_message(
        conversation_id=conv.id, content="live", created_at=BASE_TIME + timedelta(minutes=1),
    )
    gateway.history[conv.id] = [old]
    gate = asyncio.Event()
    gateway.history_gates[conv.id] = gate
    await view.mount()

    pending = asyncio.create_task(view.select(conv))
    await asyncio.sleep(0)
    transport.deliver(live)
    gate.set()
    await pending

    assert [m.content for m in view.messages] == ["old", "live"]


@pytest.mark.asyncio
async def test_incoming_message_for_other_conversation_is_ignored(view, transport):
    selected, other = _job(), _job()
    await view.mount()
    await view.select(selected)

    transport.deliver(make_message(conversation_id=other.id))

    assert view.messages == []


@pytest.mark.asyncio
async def test_incoming_message_with_same_id_but_other_kind_is_ignored(view, transport):
    conv = _job()
    await view.mount()
    await view.select(conv)

    transport.deliver(make_message(conversation_id=conv.id, kind=ConversationKind.SERVICE))

    assert view.messages == []


@pytest.mark.asyncio
async def test_duplicate_incoming_message_is_listed_once(view, transport):
    conv = _job()
    await view.mount()
    await view.select(conv)
    msg = make_message(conversation_id=conv.id)

    transport.deliver(msg)
    transport.deliver(msg)

    assert view.messages == [msg]


@pytest.mark.asyncio
async def test_scroll_listeners_fire_when_length_changes(view, gateway, transport):
    conv = _job()
    gateway.history[conv.id] = [make_message(conversation_id=conv.id)]
    lengths = []
    view.on_scroll(lengths.append)
    await view.mount()

    await view.select(conv)
    transport.deliver(make_message(conversation_id=conv.id, sender=CLIENT, receiver=WORKER))

    assert lengths == [1, 2]


@pytest.mark.asyncio
async def test_transport_error_becomes_notice(view, transport):
    await view.mount()

    transport.fail(DeliveryError("bad receiver"))

    assert view.notice == "bad receiver"


@pytest.mark.asyncio
async def test_history_failure_sets_notice(view, gateway):
    gateway.fail_history = True

    await view.select(_job())

    assert view.notice == "Messages could not be loaded"
    assert view.loading is False


@pytest.mark.asyncio
async def test_mark_read_targets_selected_conversation(view, gateway):
    conv = _job()
    assert await view.mark_read() == 0

    await view.select(conv)

    assert await view.mark_read() == 1
    assert gateway.read_calls == [conv.id]


@pytest.mark.asyncio
async def test_unmount_disconnects_transport(view, transport):
    await view.mount()
    await view.unmount()

    assert transport.stopped
