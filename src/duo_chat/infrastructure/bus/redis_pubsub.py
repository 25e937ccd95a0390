"""Redis Pub/Sub — publish side + subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from duo_chat.domain.events.message_created import MessageCreated
from duo_chat.infrastructure.bus.serializer import (
    deserialize_event,
    message_to_payload,
    payload_to_message,
    serialize_event,
)

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "chat.message_created"


class RedisMessageBus:
    """Implements application.ports.bus.MessageBus over a Pub/Sub channel."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, event: MessageCreated) -> None:
        raw = serialize_event(MESSAGE_CREATED, message_to_payload(event.message))
        await self._redis.publish(self._channel, raw)


OnMessageCreated = Callable[[MessageCreated], Coroutine[Any, Any, Any]]


class RedisMessageSubscriber:
    """Background task turning channel traffic back into MessageCreated events.

    Every process subscribes, so each one can push to the receivers it holds.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnMessageCreated,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-message-subscriber")
        logger.info("Redis message subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis message subscriber stopped")

    async def handle(self, raw: str | bytes) -> None:
        event_type, data = deserialize_event(raw)
        if event_type != MESSAGE_CREATED:
            logger.debug("Ignoring %s event on %s", event_type, self._channel)
            return
        await self._callback(MessageCreated(message=payload_to_message(data)))

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    await self.handle(message["data"])
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
