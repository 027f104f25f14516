from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_service.domain.entities.relationship import JobApplication, ServiceBooking
from chat_service.infrastructure.db.mappers import relationship as mapper
from chat_service.infrastructure.db.models.marketplace import (
    JobApplicationModel,
    JobModel,
    ServiceBookingModel,
)


class RelationshipRepo:
    """Queries over job applications and service bookings within one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_application(self, application_id: UUID) -> JobApplication | None:
        result = await self._session.get(JobApplicationModel, application_id)
        return mapper.application_to_entity(result) if result else None

    async def get_booking(self, booking_id: UUID) -> ServiceBooking | None:
        result = await self._session.get(ServiceBookingModel, booking_id)
        return mapper.booking_to_entity(result) if result else None

    async def list_worker_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        stmt = (
            select(JobApplicationModel)
            .where(
                JobApplicationModel.worker_id == user_id,
                JobApplicationModel.status == status,
            )
            .order_by(JobApplicationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.application_to_entity(m) for m in result.unique().scalars().all()]

    async def list_client_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        stmt = (
            select(JobApplicationModel)
            .join(JobModel, JobModel.id == JobApplicationModel.job_id)
            .where(
                JobModel.client_id == user_id,
                JobApplicationModel.status == status,
            )
            .order_by(JobApplicationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.application_to_entity(m) for m in result.unique().scalars().all()]

    async def list_provider_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        stmt = (
            select(ServiceBookingModel)
            .where(
                ServiceBookingModel.provider_id == user_id,
                ServiceBookingModel.status == status,
            )
            .order_by(ServiceBookingModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.booking_to_entity(m) for m in result.unique().scalars().all()]

    async def list_customer_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        stmt = (
            select(ServiceBookingModel)
            .where(
                ServiceBookingModel.customer_id == user_id,
                ServiceBookingModel.status == status,
            )
            .order_by(ServiceBookingModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.booking_to_entity(m) for m in result.unique().scalars().all()]


class SqlRelationshipReader:
    """RelationshipReader that opens a dedicated session per query.

    A failed query only poisons its own transaction, so the resolver can run
    all sources concurrently and keep the ones that succeed.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_worker_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        async with self._session_factory() as session:
            return await RelationshipRepo(session).list_worker_applications(user_id, status=status)

    async def list_client_applications(self, user_id: int, *, status: str) -> list[JobApplication]:
        async with self._session_factory() as session:
            return await RelationshipRepo(session).list_client_applications(user_id, status=status)

    async def list_provider_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        async with self._session_factory() as session:
            return await RelationshipRepo(session).list_provider_bookings(user_id, status=status)

    async def list_customer_bookings(self, user_id: int, *, status: str) -> list[ServiceBooking]:
        async with self._session_factory() as session:
            return await RelationshipRepo(session).list_customer_bookings(user_id, status=status)
