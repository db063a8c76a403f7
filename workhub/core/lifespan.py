"""Application lifespan: startup and shutdown.

Wires the delivery path (channel registry, backlog provider, dispatcher,
optional Redis fan-in), telemetry and the DB engine. No business logic here.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from workhub.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: channel registry, delivery channel (Redis publisher when
    enabled and reachable, else the local registry), dispatcher, telemetry.
    Shutdown order: drain deliveries, stop Redis fan-in, telemetry, engine.
    """
    settings = get_settings()

    # ---- Startup ----
    from workhub.api.websocket import DeliveryChannelRegistry
    from workhub.infrastructure.persistence.database import get_session_factory
    from workhub.infrastructure.services import DeliveryDispatcher, SessionBacklogProvider

    backlog = SessionBacklogProvider(
        get_session_factory(),
        window_hours=settings.notification_backlog_window_hours,
        limit=settings.notification_backlog_limit,
    )
    registry = DeliveryChannelRegistry(backlog)
    app.state.ws_registry = registry
    app.state.redis_publisher = None
    app.state.notification_broadcast_task = None
    channel = registry

    if settings.redis_enabled:
        from workhub.infrastructure.messaging.redis_pubsub import (
            RedisNotificationPublisher,
            run_notification_broadcast,
        )

        publisher = RedisNotificationPublisher()
        await publisher.connect()
        if publisher.is_available():
            app.state.redis_publisher = publisher
            app.state.notification_broadcast_task = asyncio.create_task(
                run_notification_broadcast(
                    app,
                    reconnect_delay=settings.redis_reconnect_delay,
                    max_reconnect_delay=settings.redis_max_reconnect_delay,
                )
            )
            channel = publisher
        else:
            logger.warning("Redis unavailable; delivering to local connections only")

    app.state.delivery_dispatcher = DeliveryDispatcher(channel)

    app.state.tracing = None
    if settings.telemetry_enabled:
        from workhub.infrastructure.persistence import database
        from workhub.shared.telemetry.telemetry import TracingSetup

        tracing = TracingSetup.from_settings(settings)
        tracing.start(app, database.engine)
        app.state.tracing = tracing

    yield

    # ---- Shutdown ----
    await app.state.delivery_dispatcher.drain()

    broadcast_task = app.state.notification_broadcast_task
    if broadcast_task is not None:
        broadcast_task.cancel()
        try:
            await broadcast_task
        except asyncio.CancelledError:
            pass
        logger.info("Notification broadcast task stopped")

    if app.state.redis_publisher is not None:
        await app.state.redis_publisher.disconnect()

    if app.state.tracing is not None:
        app.state.tracing.shutdown()
        logger.info("Tracing stopped")

    from workhub.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
