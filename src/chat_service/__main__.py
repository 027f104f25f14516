"""Entrypoint: python -m chat_service"""
from __future__ import annotations

import uvicorn

from chat_service.config import settings
from chat_service.log_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "chat_service.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
