from __future__ import annotations

from enum import StrEnum


class ConversationKind(StrEnum):
    JOB = "job"
    SERVICE = "service"


class RelationshipStatus(StrEnum):
    """Lifecycle of a job application or service booking (owned by the CRUD backend)."""

    REQUESTED = "requested"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantRole(StrEnum):
    WORKER = "worker"
    CLIENT = "client"
    PROVIDER = "provider"
    CUSTOMER = "customer"
