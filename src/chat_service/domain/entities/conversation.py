"""Conversations are derived from approved relationships at read time.

A conversation is a tagged union over the two relationship kinds. Shared
logic only touches ``id``, ``kind``, ``counterparty`` and ``created_at``;
the role parties and the subject summary differ per kind.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from chat_service.domain.entities.party import UNKNOWN_PARTY, Party
from chat_service.domain.entities.relationship import (
    JobApplication,
    JobSummary,
    ServiceBooking,
    ServiceSummary,
)
from chat_service.domain.value_objects.enums import ConversationKind, ParticipantRole


@dataclass(frozen=True, slots=True)
class JobConversation:
    id: UUID
    worker: Party
    client: Party
    subject: JobSummary
    created_at: datetime
    counterparty: Party = UNKNOWN_PARTY
    kind: ConversationKind = field(default=ConversationKind.JOB, init=False)

    def role_of(self, user_id: int | None) -> ParticipantRole | None:
        if user_id is None:
            return None
        if self.worker.id == user_id:
            return ParticipantRole.WORKER
        if self.client.id == user_id:
            return ParticipantRole.CLIENT
        return None

    def other_party(self, user_id: int | None) -> Party | None:
        role = self.role_of(user_id)
        if role == ParticipantRole.WORKER:
            return self.client
        if role == ParticipantRole.CLIENT:
            return self.worker
        return None

    @classmethod
    def from_application(cls, application: JobApplication, viewer_id: int) -> JobConversation:
        conv = cls(
            id=application.id,
            worker=application.worker,
            client=application.client,
            subject=application.job,
            created_at=application.created_at,
        )
        return conv.for_viewer(viewer_id)

    def for_viewer(self, viewer_id: int | None) -> JobConversation:
        counterparty = self.other_party(viewer_id) or UNKNOWN_PARTY
        return JobConversation(
            id=self.id,
            worker=self.worker,
            client=self.client,
            subject=self.subject,
            created_at=self.created_at,
            counterparty=counterparty,
        )


@dataclass(frozen=True, slots=True)
class ServiceConversation:
    id: UUID
    provider: Party
    customer: Party
    subject: ServiceSummary
    created_at: datetime
    counterparty: Party = UNKNOWN_PARTY
    kind: ConversationKind = field(default=ConversationKind.SERVICE, init=False)

    def role_of(self, user_id: int | None) -> ParticipantRole | None:
        if user_id is None:
            return None
        if self.provider.id == user_id:
            return ParticipantRole.PROVIDER
        if self.customer.id == user_id:
            return ParticipantRole.CUSTOMER
        return None

    def other_party(self, user_id: int | None) -> Party | None:
        role = self.role_of(user_id)
        if role == ParticipantRole.PROVIDER:
            return self.customer
        if role == ParticipantRole.CUSTOMER:
            return self.provider
        return None

    @classmethod
    def from_booking(cls, booking: ServiceBooking, viewer_id: int) -> ServiceConversation:
        conv = cls(
            id=booking.id,
            provider=booking.provider,
            customer=booking.customer,
            subject=booking.service,
            created_at=booking.created_at,
        )
        return conv.for_viewer(viewer_id)

    def for_viewer(self, viewer_id: int | None) -> ServiceConversation:
        counterparty = self.other_party(viewer_id) or UNKNOWN_PARTY
        return ServiceConversation(
            id=self.id,
            provider=self.provider,
            customer=self.customer,
            subject=self.subject,
            created_at=self.created_at,
            counterparty=counterparty,
        )


Conversation = JobConversation | ServiceConversation
