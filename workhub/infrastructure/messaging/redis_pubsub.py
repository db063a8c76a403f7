"""Redis Pub/Sub fan-in for notification delivery across worker processes.

Each process publishes deliveries to notifications:{principal_id}; every
process runs run_notification_broadcast, which forwards what it receives to
its own in-memory channel registry.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import redis.asyncio as redis

from workhub.core.config import get_settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notifications"


class _RedisPubSubBase:
    """Shared Redis connection and channel logic for notification pub/sub."""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        if self.redis is None:
            password = self.settings.redis_password
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=password.get_secret_value() if password else None,
                    max_connections=self.settings.redis_max_connections,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected."""
        return self._connected and self.redis is not None

    @staticmethod
    def channel_for(principal_id: str) -> str:
        return f"{CHANNEL_PREFIX}:{principal_id}"


class RedisNotificationPublisher(_RedisPubSubBase):
    """Delivery channel that publishes events to the principal's Redis channel.

    send() returns the number of subscribed processes, not sockets.
    """

    async def send(self, principal_id: str, event: dict[str, Any]) -> int:
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping publish")
            return 0
        channel = self.channel_for(principal_id)
        receivers = await self.redis.publish(channel, json.dumps(event))
        logger.debug("Published %s to %s (%d receivers)", event.get("type"), channel, receivers)
        return int(receivers)


def _principal_from_channel(channel: Any) -> str | None:
    channel_str = channel.decode() if isinstance(channel, bytes) else str(channel or "")
    prefix, _, principal_id = channel_str.partition(":")
    if prefix != CHANNEL_PREFIX or not principal_id:
        return None
    return principal_id


async def _forward(registry: Any, principal_id: str, event: dict[str, Any]) -> None:
    try:
        await registry.send(principal_id, event)
    except Exception:
        logger.exception("Forwarding notification to %s failed", principal_id)


def _schedule_forward(app: Any, message: dict[str, Any], forwards: set[asyncio.Task[None]]) -> None:
    if message["type"] != "pmessage":
        return
    principal_id = _principal_from_channel(message.get("channel"))
    if principal_id is None:
        return
    try:
        event = json.loads(message["data"])
    except (json.JSONDecodeError, KeyError, TypeError):
        logger.exception("Failed to parse notification message")
        return
    registry = getattr(app.state, "ws_registry", None)
    if registry is None:
        return
    # One task per event: a slow socket must not hold up the subscription.
    task = asyncio.create_task(_forward(registry, principal_id, event))
    forwards.add(task)
    task.add_done_callback(forwards.discard)


async def _close_pubsub(pubsub: Any) -> None:
    try:
        await pubsub.punsubscribe()
    except redis.RedisError as e:
        logger.debug("Unsubscribe after connection loss failed: %s", e)
    await pubsub.aclose()


async def run_notification_broadcast(
    app: Any,
    redis_client: redis.Redis | None = None,
    *,
    reconnect_delay: float = 1.0,
    max_reconnect_delay: float = 30.0,
) -> None:
    """Subscribe to notifications:* and forward each event to the local channel registry.

    Call as a background task from lifespan when Redis is enabled. A lost
    connection is retried with exponential backoff (reset once subscribed
    again). Cancelling the task stops the loop and any forwards in flight.
    """
    subscriber = _RedisPubSubBase(redis_client)
    forwards: set[asyncio.Task[None]] = set()
    delay = reconnect_delay
    try:
        while True:
            await subscriber.connect()
            if subscriber.is_available() and subscriber.redis is not None:
                pubsub = subscriber.redis.pubsub()
                try:
                    await pubsub.psubscribe(f"{CHANNEL_PREFIX}:*")
                    logger.info("Subscribed to %s:* for WebSocket delivery", CHANNEL_PREFIX)
                    delay = reconnect_delay
                    async for message in pubsub.listen():
                        _schedule_forward(app, message, forwards)
                    logger.warning("Notification subscription ended; resubscribing")
                except (redis.ConnectionError, redis.TimeoutError) as e:
                    logger.warning("Notification broadcast lost its Redis connection: %s", e)
                finally:
                    await _close_pubsub(pubsub)
            else:
                logger.warning("Redis not available, notification broadcast waiting")
            await asyncio.sleep(delay)
            delay = min(delay * 2, max_reconnect_delay)
    except asyncio.CancelledError:
        logger.info("Notification broadcast task cancelled")
        for task in list(forwards):
            task.cancel()
        raise
