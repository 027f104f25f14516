from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_service.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_service.api.v1.routers import conversations, health, messages, ws
from chat_service.application.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from chat_service.config import settings
from chat_service.infrastructure.bus.local import LocalRoomPublisher
from chat_service.infrastructure.bus.redis_pubsub import (
    RedisPubSubSubscriber,
    RedisRoomPublisher,
)
from chat_service.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle.

    Without ``REDIS_URL`` rooms are fanned out in-process only.
    """
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set, room events stay in this process")
        yield
        return

    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    manager: ConnectionManager = app.state.ws_manager
    subscriber = RedisPubSubSubscriber(
        app.state.redis,
        settings.REDIS_PUBSUB_CHANNEL,
        manager.broadcast_to_room,
    )
    await subscriber.start()
    app.state.pubsub_subscriber = subscriber
    app.state.room_publisher = RedisRoomPublisher(app.state.redis, settings.REDIS_PUBSUB_CHANNEL)

    yield

    await subscriber.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.ws_manager = ConnectionManager()
    app.state.room_publisher = LocalRoomPublisher(app.state.ws_manager)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
