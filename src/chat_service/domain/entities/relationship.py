from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from chat_service.domain.entities.party import Party
from chat_service.domain.value_objects.enums import RelationshipStatus


@dataclass(frozen=True, slots=True)
class JobSummary:
    job_id: UUID
    title: str
    description: str
    category: str
    budget: Decimal | None
    status: str


@dataclass(frozen=True, slots=True)
class ServiceSummary:
    service_id: UUID
    title: str
    category: str
    price: Decimal | None
    status: str
    booking_date: date | None = None
    booking_time: str | None = None


@dataclass(frozen=True, slots=True)
class JobApplication:
    id: UUID
    status: str
    job: JobSummary
    worker: Party
    client: Party
    created_at: datetime

    @property
    def is_approved(self) -> bool:
        return self.status == RelationshipStatus.APPROVED


@dataclass(frozen=True, slots=True)
class ServiceBooking:
    id: UUID
    status: str
    service: ServiceSummary
    provider: Party
    customer: Party
    created_at: datetime

    @property
    def is_approved(self) -> bool:
        return self.status == RelationshipStatus.APPROVED
