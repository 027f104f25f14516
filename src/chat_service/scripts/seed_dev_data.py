"""Seed development data: two users linked by an approved job application and an approved booking."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select

from chat_service.config import settings
from chat_service.domain.entities.message import Message
from chat_service.domain.entities.party import Party
from chat_service.domain.value_objects.enums import ConversationKind, RelationshipStatus
from chat_service.infrastructure.db.base import Base
from chat_service.infrastructure.db.models import (
    JobApplicationModel,
    JobModel,
    ServiceBookingModel,
    ServiceModel,
    UserModel,
)
from chat_service.infrastructure.db.session import AsyncSessionLocal, engine
from chat_service.infrastructure.db.uow import SqlAlchemyUoW
from chat_service.log_config import configure_logging

logger = logging.getLogger(__name__)

CLIENT = Party(id=1, display_name="Alice Client", email="alice@example.com")
WORKER = Party(id=2, display_name="Bob Worker", email="bob@example.com")


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        existing = await session.scalar(select(UserModel).where(UserModel.id == CLIENT.id))
        if existing is not None:
            logger.info("Development data already present, nothing to do")
            return

        for party in (CLIENT, WORKER):
            session.add(UserModel(id=party.id, name=party.display_name, email=party.email))

        job = JobModel(
            id=uuid.uuid4(),
            client_id=CLIENT.id,
            title="Fix the garden fence",
            description="Two broken panels on the north side.",
            category="repairs",
            budget=Decimal("150.00"),
        )
        service = ServiceModel(
            id=uuid.uuid4(),
            provider_id=WORKER.id,
            title="Lawn mowing",
            category="gardening",
            price=Decimal("40.00"),
        )
        session.add_all([job, service])
        await session.flush()

        application = JobApplicationModel(
            id=uuid.uuid4(),
            job_id=job.id,
            worker_id=WORKER.id,
            status=RelationshipStatus.APPROVED,
        )
        booking = ServiceBookingModel(
            id=uuid.uuid4(),
            service_id=service.id,
            customer_id=CLIENT.id,
            provider_id=WORKER.id,
            status=RelationshipStatus.APPROVED,
            booking_date=date.today() + timedelta(days=3),
            booking_time="10:00",
        )
        session.add_all([application, booking])
        await session.flush()

        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)
        thread = [
            (ConversationKind.JOB, application.id, CLIENT, WORKER, "Hi Bob, when could you start?"),
            (ConversationKind.JOB, application.id, WORKER, CLIENT, "Next Monday works for me."),
            (ConversationKind.SERVICE, booking.id, CLIENT, WORKER, "Please bring your own mower."),
        ]
        for offset, (kind, conversation_id, sender, receiver, content) in enumerate(thread):
            await uow.messages_w.create_if_not_exists(
                Message(
                    id=uuid.uuid4(),
                    conversation_id=conversation_id,
                    conversation_kind=kind,
                    sender=sender,
                    receiver=receiver,
                    content=content,
                    client_msg_id=uuid.uuid4(),
                    created_at=now + timedelta(seconds=offset),
                )
            )

        await uow.commit()
        logger.info(
            "Seeded application %s and booking %s with %d messages",
            application.id, booking.id, len(thread),
        )


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
