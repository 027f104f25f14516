from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Identity,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_service.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    # Tie-breaker for messages sharing a timestamp.
    seq: Mapped[int] = mapped_column(BigInteger, Identity(always=True), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # job | service
    application_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job_applications.id", ondelete="CASCADE"),
        nullable=True,
    )
    booking_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("service_bookings.id", ondelete="CASCADE"),
        nullable=True,
    )
    sender_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    receiver_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    client_msg_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    sender = relationship("UserModel", foreign_keys=[sender_id], lazy="joined")
    receiver = relationship("UserModel", foreign_keys=[receiver_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("sender_id", "client_msg_id", name="uq_message_idempotency"),
        CheckConstraint(
            "(type = 'job' AND application_id IS NOT NULL AND booking_id IS NULL)"
            " OR (type = 'service' AND booking_id IS NOT NULL AND application_id IS NULL)",
            name="ck_message_conversation_ref",
        ),
        Index("ix_messages_application_timeline", "application_id", "created_at", "seq"),
        Index("ix_messages_booking_timeline", "booking_id", "created_at", "seq"),
        Index("ix_messages_receiver_unread", "receiver_id", "read"),
    )
