"""Post-commit notification delivery.

DeliveryOutbox collects notifications created during one request and hands
them to the DeliveryDispatcher only once the request transaction has
committed. The dispatcher pushes each one through the delivery channel as a
background task; failures are logged and never reach the request.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from workhub.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from workhub.application.dtos.notification import NotificationResult
    from workhub.application.interfaces.services import IDeliveryChannel

logger = get_logger(__name__)


def notification_event(notification: NotificationResult) -> dict[str, Any]:
    """Wire event pushed to clients for a persisted notification."""
    return {"type": "notification", "data": notification.to_dict()}


class DeliveryDispatcher:
    """Runs deliveries as background tasks, keeping references until they finish."""

    def __init__(self, channel: IDeliveryChannel | None) -> None:
        self.channel = channel
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def dispatch(self, notifications: list[NotificationResult]) -> list[asyncio.Task[None]]:
        """Schedule one delivery per notification. Returns the scheduled tasks."""
        if self.channel is None or not notifications:
            return []
        scheduled = []
        for notification in notifications:
            task = asyncio.create_task(
                self._deliver(notification), name=f"deliver-{notification.id}"
            )
            self._tasks.add(task)
            task.add_done_callback(self._finished)
            scheduled.append(task)
        return scheduled

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Delivery task %s crashed", task.get_name(), exc_info=exc)

    async def _deliver(self, notification: NotificationResult) -> None:
        assert self.channel is not None
        try:
            await self.channel.send(notification.recipient_id, notification_event(notification))
        except (AssertionError, AttributeError, IndexError, KeyError, NameError, TypeError):
            # Programming errors are not masked; _finished logs them once.
            raise
        except Exception:
            logger.exception(
                "Delivery of notification %s to %s failed",
                notification.id,
                notification.recipient_id,
            )

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown, tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class DeliveryOutbox:
    """Per-request delivery queue. Implements IDeliveryQueue.

    release() after commit; discard() on rollback. Both are idempotent.
    """

    def __init__(self, dispatcher: DeliveryDispatcher | None) -> None:
        self.dispatcher = dispatcher
        self._pending: list[NotificationResult] = []

    @property
    def pending(self) -> tuple[NotificationResult, ...]:
        return tuple(self._pending)

    def enqueue(self, notification: NotificationResult) -> None:
        self._pending.append(notification)

    def release(self) -> list[asyncio.Task[None]]:
        pending, self._pending = self._pending, []
        if self.dispatcher is None:
            return []
        if pending:
            logger.debug("Releasing %d queued deliveries", len(pending))
        return self.dispatcher.dispatch(pending)

    def discard(self) -> None:
        if self._pending:
            logger.debug("Dropping %d queued deliveries after rollback", len(self._pending))
        self._pending = []
