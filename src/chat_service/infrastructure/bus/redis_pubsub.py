"""Redis Pub/Sub room fan-out across service instances."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine
from uuid import UUID

import redis.asyncio as aioredis

from chat_service.infrastructure.bus.serializer import (
    deserialize_room_event,
    serialize_room_event,
)

logger = logging.getLogger(__name__)


class RedisRoomPublisher:
    """Implements application.ports.bus.RoomPublisher.

    Every instance (this one included) receives the event through its
    :class:`RedisPubSubSubscriber` and delivers it to its local sessions.
    """

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish_to_room(self, room: UUID, event_type: str, data: dict[str, Any]) -> None:
        await self._redis.publish(self._channel, serialize_room_event(room, event_type, data))


OnRoomEventCallback = Callable[[UUID, str, dict[str, Any]], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches room events."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnRoomEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis Pub/Sub subscriber stopped")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    room, event_type, data = deserialize_room_event(message["data"])
                except (ValueError, KeyError, TypeError):
                    logger.warning("Discarding malformed pubsub message")
                    continue
                try:
                    await self._callback(room, event_type, data)
                except Exception:
                    logger.exception("Error dispatching pubsub event to room %s", room)
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
