"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from chat_service.application.dto.principal import Principal
from chat_service.domain.entities.message import Message
from chat_service.domain.entities.party import Party
from chat_service.domain.entities.relationship import (
    JobApplication,
    JobSummary,
    ServiceBooking,
    ServiceSummary,
)
from chat_service.domain.value_objects.enums import ConversationKind, RelationshipStatus

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

WORKER = Party(id=10, display_name="Walt Worker", email="walt@example.com")
CLIENT = Party(id=20, display_name="Cleo Client", email="cleo@example.com")
PROVIDER = Party(id=30, display_name="Pia Provider", email="pia@example.com")
CUSTOMER = Party(id=40, display_name="Cole Customer", email="cole@example.com")
STRANGER = Party(id=99, display_name="Sam Stranger", email="sam@example.com")


@pytest.fixture
def worker_principal() -> Principal:
    return Principal(user_id=WORKER.id)


@pytest.fixture
def client_principal() -> Principal:
    return Principal(user_id=CLIENT.id)


@pytest.fixture
def stranger_principal() -> Principal:
    return Principal(user_id=STRANGER.id)


def make_application(
    *,
    application_id: UUID | None = None,
    worker: Party = WORKER,
    client: Party = CLIENT,
    status: str = RelationshipStatus.APPROVED,
    created_at: datetime | None = None,
    title: str = "Paint the fence",
) -> JobApplication:
    return JobApplication(
        id=application_id or uuid.uuid4(),
        status=status,
        job=JobSummary(
            job_id=uuid.uuid4(),
            title=title,
            description="",
            category="repairs",
            budget=Decimal("100.00"),
            status="open",
        ),
        worker=worker,
        client=client,
        created_at=created_at or BASE_TIME,
    )


def make_booking(
    *,
    booking_id: UUID | None = None,
    provider: Party = PROVIDER,
    customer: Party = CUSTOMER,
    status: str = RelationshipStatus.APPROVED,
    created_at: datetime | None = None,
    title: str = "Lawn mowing",
) -> ServiceBooking:
    return ServiceBooking(
        id=booking_id or uuid.uuid4(),
        status=status,
        service=ServiceSummary(
            service_id=uuid.uuid4(),
            title=title,
            category="gardening",
            price=Decimal("40.00"),
            status="active",
        ),
        provider=provider,
        customer=customer,
        created_at=created_at or BASE_TIME,
    )


def make_message(
    *,
    conversation_id: UUID,
    kind: ConversationKind = ConversationKind.JOB,
    sender: Party = WORKER,
    receiver: Party = CLIENT,
    content: str = "hello",
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        conversation_kind=kind,
        sender=sender,
        receiver=receiver,
        content=content,
        client_msg_id=uuid.uuid4(),
        created_at=created_at or BASE_TIME,
    )


@dataclass
class FakeRelationshipStore:
    """Implements both RelationshipLookup and RelationshipReader over in-memory lists."""

    applications: list[JobApplication] = field(default_factory=list)
    bookings: list[ServiceBooking] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def _check(self, source: str) -> None:
        self.calls.append(source)
        if source in self.failing:
            raise ConnectionError(f"{source} unavailable")

    async def get_application(self, application_id: UUID) -> JobApplication | None:
        return next((a for a in self.applications if a.id == application_id), None)

    async def get_booking(self, booking_id: UUID) -> ServiceBooking | None:
        return next((b for b in self.bookings if b.id == booking_id), None)

    async def list_worker_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        self._check("job:worker")
        return [a for a in self.applications if a.worker.id == user_id and a.status == status]

    async def list_client_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        self._check("job:client")
        return [a for a in self.applications if a.client.id == user_id and a.status == status]

    async def list_provider_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        self._check("service:provider")
        return [b for b in self.bookings if b.provider.id == user_id and b.status == status]

    async def list_customer_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        self._check("service:customer")
        return [b for b in self.bookings if b.customer.id == user_id and b.status == status]


@dataclass
class FakeUserReader:
    parties: dict[int, Party] = field(
        default_factory=lambda: {p.id: p for p in (WORKER, CLIENT, PROVIDER, CUSTOMER, STRANGER)}
    )

    async def get_party(self, user_id: int) -> Party | None:
        return self.parties.get(user_id)


@dataclass
class FakeMessageStore:
    """MessageReader + MessageWriter."""

    _messages: list[Message] = field(default_factory=list)

    async def list_messages(self, conversation_id: UUID, kind: ConversationKind) -> list[Message]:
        return [
            m for m in self._messages
            if m.conversation_id == conversation_id and m.conversation_kind == kind
        ]

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        for existing in self._messages:
            if (
                existing.sender.id == message.sender.id
                and existing.client_msg_id == message.client_msg_id
            ):
                return existing, False
        self._messages.append(message)
        return message, True

    async def mark_read(self, conversation_id: UUID, kind: ConversationKind, receiver_id: int) -> int:
        updated = 0
        for i, m in enumerate(self._messages):
            if (
                m.conversation_id == conversation_id
                and m.conversation_kind == kind
                and m.receiver.id == receiver_id
                and not m.read
            ):
                self._messages[i] = Message(
                    id=m.id,
                    conversation_id=m.conversation_id,
                    conversation_kind=m.conversation_kind,
                    sender=m.sender,
                    receiver=m.receiver,
                    content=m.content,
                    client_msg_id=m.client_msg_id,
                    created_at=m.created_at,
                    read=True,
                )
                updated += 1
        return updated


class FakeUoW:
    def __init__(self) -> None:
        self.relationships = FakeRelationshipStore()
        self.users = FakeUserReader()
        store = FakeMessageStore()
        self.messages = store
        self.messages_w = store
        self.committed = 0
        self.rolled_back = 0

    async def commit(self) -> None:
        self.committed += 1

    async def rollback(self) -> None:
        self.rolled_back += 1

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, *exc) -> None:
        return None


class FixedClock:
    def __init__(self, start: datetime = BASE_TIME) -> None:
        self._now = start

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now
