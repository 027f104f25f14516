"""Import all models so Base.metadata sees every table."""
from chat_service.infrastructure.db.models.marketplace import (
    JobApplicationModel,
    JobModel,
    ServiceBookingModel,
    ServiceModel,
    UserModel,
)
from chat_service.infrastructure.db.models.message import MessageModel

__all__ = [
    "JobApplicationModel",
    "JobModel",
    "MessageModel",
    "ServiceBookingModel",
    "ServiceModel",
    "UserModel",
]
