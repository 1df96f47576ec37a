"""Cross-process update fan-out over Redis Pub/Sub.

Every server process publishes each routed update to one channel and runs a
subscriber that re-dispatches what it hears to its own connections, so a
client gets the update no matter which process it is connected to.
"""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from chat_sync.api.v1.schemas.chat import ChatUpdatePayload
from chat_sync.application.dto.events import UpdateRoute
from chat_sync.domain.events.chat_update import ChatUpdate
from chat_sync.infrastructure.bus.serializer import (
    CHAT_UPDATE_EVENT,
    decode_update,
    deserialize_event,
    encode_update,
)
from chat_sync.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.bus.UpdatePublisher across processes."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, route: UpdateRoute, update: ChatUpdate) -> None:
        raw = encode_update(route, ChatUpdatePayload.from_update(update))
        receivers = await self._redis.publish(self._channel, raw)
        logger.debug("Update for chat %s reached %s subscriber(s)", update.chat.id, receivers)


class RedisUpdateSubscriber:
    """Background task feeding updates from the channel to local connections."""

    def __init__(self, redis: aioredis.Redis, channel: str, connections: ConnectionManager) -> None:
        self._redis = redis
        self._channel = channel
        self._connections = connections
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-update-subscriber")
        logger.info("Redis update subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Redis update subscriber stopped")

    async def handle(self, raw: str | bytes) -> int:
        """Dispatch one channel message locally. Returns the number of deliveries."""
        event_type, data = deserialize_event(raw)
        if event_type != CHAT_UPDATE_EVENT:
            logger.debug("Ignoring pubsub event %s", event_type)
            return 0
        route, payload = decode_update(data)
        return await self._connections.dispatch(route, payload)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                # one bad message must not stop delivery of the rest
                try:
                    await self.handle(message["data"])
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
