from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_service.domain.entities.relationship import JobApplication, ServiceBooking


class RelationshipReader(Protocol):
    """Read access to the marketplace relationships conversations derive from.

    Each list call must be safe to run concurrently with the others.
    """

    async def list_worker_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        """Applications submitted by ``user_id``."""
        ...

    async def list_client_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        """Applications to jobs posted by ``user_id``."""
        ...

    async def list_provider_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]: ...

    async def list_customer_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]: ...


class RelationshipLookup(Protocol):
    async def get_application(self, application_id: UUID) -> JobApplication | None: ...

    async def get_booking(self, booking_id: UUID) -> ServiceBooking | None: ...
