from __future__ import annotations

from chat_service.domain.entities.party import UNKNOWN_PARTY, Party
from chat_service.infrastructure.db.models.marketplace import UserModel


def model_to_entity(model: UserModel | None) -> Party:
    if model is None:
        return UNKNOWN_PARTY
    return Party(id=model.id, display_name=model.name, email=model.email or "")
