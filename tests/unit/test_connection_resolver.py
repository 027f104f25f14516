from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from chat_service.domain.value_objects.enums import ConversationKind, RelationshipStatus
from chat_service.services.connection_resolver import resolve_conversations
from tests.conftest import (
    BASE_TIME,
    CLIENT,
    CUSTOMER,
    PROVIDER,
    WORKER,
    FakeRelationshipStore,
    make_application,
    make_booking,
)


@pytest.mark.asyncio
async def test_merges_job_and_service_conversations_newest_first():
    # Walt is the worker on one job and the customer of one booking.
    store = FakeRelationshipStore()
    older = make_application(created_at=BASE_TIME)
    newer = make_booking(customer=WORKER, created_at=BASE_TIME + timedelta(hours=1))
    store.applications.append(older)
    store.bookings.append(newer)

    resolved = await resolve_conversations(WORKER.id, store)

    assert [c.id for c in resolved.conversations] == [newer.id, older.id]
    assert [c.kind for c in resolved.conversations] == [
        ConversationKind.SERVICE,
        ConversationKind.JOB,
    ]
    assert resolved.complete
    assert resolved.warnings == []


@pytest.mark.asyncio
async def test_counterparty_is_the_other_role():
    store = FakeRelationshipStore()
    store.applications.append(make_application())
    store.bookings.append(make_booking())

    as_worker = await resolve_conversations(WORKER.id, store)
    as_client = await resolve_conversations(CLIENT.id, store)
    as_provider = await resolve_conversations(PROVIDER.id, store)

    assert as_worker.conversations[0].counterparty == CLIENT
    assert as_client.conversations[0].counterparty == WORKER
    assert as_provider.conversations[0].counterparty == CUSTOMER


@pytest.mark.asyncio
async def test_only_approved_relationships_become_conversations():
    store = FakeRelationshipStore()
    approved = make_application()
    store.applications.extend([
        approved,
        make_application(status=RelationshipStatus.PENDING),
        make_application(status=RelationshipStatus.REJECTED),
    ])
    store.bookings.append(make_booking(customer=WORKER, status=RelationshipStatus.REQUESTED))

    resolved = await resolve_conversations(WORKER.id, store)

    assert [c.id for c in resolved.conversations] == [approved.id]


@pytest.mark.asyncio
async def test_relationship_appears_once_approved():
    store = FakeRelationshipStore()
    pending = make_application(status=RelationshipStatus.PENDING)
    store.applications.append(pending)

    before = await resolve_conversations(WORKER.id, store)
    store.applications[0] = dataclasses.replace(pending, status=RelationshipStatus.APPROVED)
    after = await resolve_conversations(WORKER.id, store)

    assert before.conversations == []
    assert [c.id for c in after.conversations] == [pending.id]
    assert after.conversations[0].counterparty == CLIENT


@pytest.mark.asyncio
async def test_all_four_sources_queried_for_every_viewer():
    store = FakeRelationshipStore()

    await resolve_conversations(CLIENT.id, store)

    assert sorted(store.calls) == [
        "job:client", "job:worker", "service:customer", "service:provider",
    ]


@pytest.mark.asyncio
async def test_failing_source_is_reported_and_others_still_contribute():
    store = FakeRelationshipStore(failing={"job:worker"})
    booking = make_booking(customer=WORKER)
    store.applications.append(make_application())
    store.bookings.append(booking)

    resolved = await resolve_conversations(WORKER.id, store)

    assert [c.id for c in resolved.conversations] == [booking.id]
    assert resolved.failed_sources == ["job:worker"]
    assert not resolved.complete
    assert not resolved.failed
    assert len(resolved.warnings) == 1


@pytest.mark.asyncio
async def test_all_sources_failing_yields_empty_list_and_failed_flag():
    store = FakeRelationshipStore(
        failing={"job:worker", "job:client", "service:provider", "service:customer"},
    )

    resolved = await resolve_conversations(WORKER.id, store)

    assert resolved.conversations == []
    assert resolved.failed


@pytest.mark.asyncio
async def test_duplicate_records_are_collapsed():
    store = FakeRelationshipStore()
    app = make_application()
    store.applications.extend([app, app])

    resolved = await resolve_conversations(WORKER.id, store)

    assert len(resolved.conversations) == 1


@pytest.mark.asyncio
async def test_user_without_relationships_gets_empty_list():
    store = FakeRelationshipStore()
    store.applications.append(make_application())

    resolved = await resolve_conversations(12345, store)

    assert resolved.conversations == []
    assert resolved.complete
