from __future__ import annotations

from chat_service.domain.entities.relationship import (
    JobApplication,
    JobSummary,
    ServiceBooking,
    ServiceSummary,
)
from chat_service.infrastructure.db.mappers import party
from chat_service.infrastructure.db.models.marketplace import (
    JobApplicationModel,
    ServiceBookingModel,
)


def application_to_entity(model: JobApplicationModel) -> JobApplication:
    job = model.job
    return JobApplication(
        id=model.id,
        status=model.status,
        job=JobSummary(
            job_id=job.id,
            title=job.title,
            description=job.description,
            category=job.category,
            budget=job.budget,
            status=job.status,
        ),
        worker=party.model_to_entity(model.worker),
        client=party.model_to_entity(job.client),
        created_at=model.created_at,
    )


def booking_to_entity(model: ServiceBookingModel) -> ServiceBooking:
    service = model.service
    return ServiceBooking(
        id=model.id,
        status=model.status,
        service=ServiceSummary(
            service_id=service.id,
            title=service.title,
            category=service.category,
            price=service.price,
            status=service.status,
            booking_date=model.booking_date,
            booking_time=model.booking_time,
        ),
        provider=party.model_to_entity(model.provider),
        customer=party.model_to_entity(model.customer),
        created_at=model.created_at,
    )
