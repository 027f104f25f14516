from __future__ import annotations

from typing import Any

import jwt

from chat_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from verified JWT claims (``sub`` is the user id)."""
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token has no numeric subject") from exc
    return Principal(user_id=user_id)
