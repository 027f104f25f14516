from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from chat_service.application.dto.conversation import ResolvedConversations
from chat_service.domain.entities.conversation import (
    Conversation,
    JobConversation,
    ServiceConversation,
)
from chat_service.domain.entities.party import Party
from chat_service.domain.entities.relationship import JobSummary, ServiceSummary


class PartyOut(BaseModel):
    id: int | None
    display_name: str
    email: str = ""

    @classmethod
    def from_entity(cls, party: Party) -> PartyOut:
        return cls(id=party.id, display_name=party.display_name, email=party.email)

    def to_entity(self) -> Party:
        return Party(id=self.id, display_name=self.display_name, email=self.email)


class JobSummaryOut(BaseModel):
    job_id: UUID
    title: str
    description: str = ""
    category: str = ""
    budget: Decimal | None = None
    status: str = ""

    @classmethod
    def from_entity(cls, job: JobSummary) -> JobSummaryOut:
        return cls(
            job_id=job.job_id,
            title=job.title,
            description=job.description,
            category=job.category,
            budget=job.budget,
            status=job.status,
        )

    def to_entity(self) -> JobSummary:
        return JobSummary(
            job_id=self.job_id,
            title=self.title,
            description=self.description,
            category=self.category,
            budget=self.budget,
            status=self.status,
        )


class ServiceSummaryOut(BaseModel):
    service_id: UUID
    title: str
    category: str = ""
    price: Decimal | None = None
    status: str = ""
    booking_date: date | None = None
    booking_time: str | None = None

    @classmethod
    def from_entity(cls, service: ServiceSummary) -> ServiceSummaryOut:
        return cls(
            service_id=service.service_id,
            title=service.title,
            category=service.category,
            price=service.price,
            status=service.status,
            booking_date=service.booking_date,
            booking_time=service.booking_time,
        )

    def to_entity(self) -> ServiceSummary:
        return ServiceSummary(
            service_id=self.service_id,
            title=self.title,
            category=self.category,
            price=self.price,
            status=self.status,
            booking_date=self.booking_date,
            booking_time=self.booking_time,
        )


class JobConversationOut(BaseModel):
    kind: Literal["job"] = "job"
    id: UUID
    worker: PartyOut
    client: PartyOut
    counterparty: PartyOut
    job: JobSummaryOut
    created_at: datetime

    @classmethod
    def from_entity(cls, conv: JobConversation) -> JobConversationOut:
        return cls(
            id=conv.id,
            worker=PartyOut.from_entity(conv.worker),
            client=PartyOut.from_entity(conv.client),
            counterparty=PartyOut.from_entity(conv.counterparty),
            job=JobSummaryOut.from_entity(conv.subject),
            created_at=conv.created_at,
        )

    def to_entity(self) -> JobConversation:
        return JobConversation(
            id=self.id,
            worker=self.worker.to_entity(),
            client=self.client.to_entity(),
            subject=self.job.to_entity(),
            created_at=self.created_at,
            counterparty=self.counterparty.to_entity(),
        )


class ServiceConversationOut(BaseModel):
    kind: Literal["service"] = "service"
    id: UUID
    provider: PartyOut
    customer: PartyOut
    counterparty: PartyOut
    service: ServiceSummaryOut
    created_at: datetime

    @classmethod
    def from_entity(cls, conv: ServiceConversation) -> ServiceConversationOut:
        return cls(
            id=conv.id,
            provider=PartyOut.from_entity(conv.provider),
            customer=PartyOut.from_entity(conv.customer),
            counterparty=PartyOut.from_entity(conv.counterparty),
            service=ServiceSummaryOut.from_entity(conv.subject),
            created_at=conv.created_at,
        )

    def to_entity(self) -> ServiceConversation:
        return ServiceConversation(
            id=self.id,
            provider=self.provider.to_entity(),
            customer=self.customer.to_entity(),
            subject=self.service.to_entity(),
            created_at=self.created_at,
            counterparty=self.counterparty.to_entity(),
        )


ConversationOut = Annotated[
    JobConversationOut | ServiceConversationOut,
    Field(discriminator="kind"),
]


def conversation_out(conv: Conversation) -> JobConversationOut | ServiceConversationOut:
    if isinstance(conv, JobConversation):
        return JobConversationOut.from_entity(conv)
    return ServiceConversationOut.from_entity(conv)


class ConversationListResponse(BaseModel):
    """Merged conversation list.

    ``warnings`` names sources that failed while others succeeded; ``error`` is
    set only when every source failed.
    """

    items: list[ConversationOut] = []
    warnings: list[str] = []
    error: str | None = None

    @classmethod
    def from_resolved(cls, resolved: ResolvedConversations) -> ConversationListResponse:
        return cls(
            items=[conversation_out(c) for c in resolved.conversations],
            warnings=[] if resolved.failed else resolved.warnings,
            error="Conversations could not be loaded" if resolved.failed else None,
        )
