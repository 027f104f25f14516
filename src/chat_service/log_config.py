"""Process-wide logging setup shared by the API and the scripts."""
from __future__ import annotations

import logging

from chat_service.api.middleware.correlation_id import correlation_id_ctx

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s]: %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Attach the current request's correlation id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get() or "-"
        return True


def configure_logging(level: str | int = logging.INFO) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
