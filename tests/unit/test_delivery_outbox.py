"""DeliveryOutbox and DeliveryDispatcher: post-commit, best-effort delivery."""

import asyncio
import logging
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from workhub.application.dtos.notification import NotificationResult
from workhub.infrastructure.services import DeliveryDispatcher, DeliveryOutbox
from workhub.infrastructure.services.delivery_outbox import notification_event


def _notification(n: int, recipient_id: str = "u1") -> NotificationResult:
    return NotificationResult(
        id=f"n{n}",
        recipient_id=recipient_id,
        actor_id="u2",
        actor_name="Dos",
        type="UPDATE_TASK",
        data={"task_id": "t1"},
        is_read=False,
        read_at=None,
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


def test_notification_event_shape() -> None:
    event = notification_event(_notification(1))
    assert event["type"] == "notification"
    assert event["data"]["id"] == "n1"
    assert event["data"]["created_at"] == "2025-01-01T00:00:00+00:00"
    assert event["data"]["read_at"] is None


async def test_release_delivers_in_order_after_commit() -> None:
    channel = AsyncMock()
    channel.send = AsyncMock(return_value=1)
    dispatcher = DeliveryDispatcher(channel)
    outbox = DeliveryOutbox(dispatcher)
    outbox.enqueue(_notification(1, "u1"))
    outbox.enqueue(_notification(2, "u2"))

    channel.send.assert_not_awaited()
    tasks = outbox.release()
    await asyncio.gather(*tasks)

    assert [c.args[0] for c in channel.send.await_args_list] == ["u1", "u2"]
    assert outbox.pending == ()
    assert outbox.release() == []


async def test_discard_drops_queued_deliveries() -> None:
    channel = AsyncMock()
    outbox = DeliveryOutbox(DeliveryDispatcher(channel))
    outbox.enqueue(_notification(1))
    outbox.discard()
    assert outbox.release() == []
    channel.send.assert_not_awaited()


async def test_outbox_without_dispatcher_is_inert() -> None:
    outbox = DeliveryOutbox(None)
    outbox.enqueue(_notification(1))
    assert outbox.release() == []


async def test_channel_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    channel = AsyncMock()
    channel.send = AsyncMock(side_effect=ConnectionError("socket closed"))
    dispatcher = DeliveryDispatcher(channel)
    with caplog.at_level(logging.ERROR):
        (task,) = dispatcher.dispatch([_notification(1)])
        await task
    assert "Delivery of notification n1 to u1 failed" in caplog.text


async def test_programming_error_is_reraised() -> None:
    channel = AsyncMock()
    channel.send = AsyncMock(side_effect=TypeError("bad call"))
    dispatcher = DeliveryDispatcher(channel)
    (task,) = dispatcher.dispatch([_notification(1)])
    with pytest.raises(TypeError):
        await task


async def test_crashed_delivery_task_is_logged_without_awaiting(
    caplog: pytest.LogCaptureFixture,
) -> None:
    channel = AsyncMock()
    channel.send = AsyncMock(side_effect=KeyError("event"))
    dispatcher = DeliveryDispatcher(channel)

    with caplog.at_level(logging.ERROR):
        dispatcher.dispatch([_notification(1)])
        await dispatcher.drain()
        await asyncio.sleep(0)

    assert "Delivery task deliver-n1 crashed" in caplog.text
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 1
    assert dispatcher.in_flight == 0


async def test_drain_waits_for_in_flight_deliveries() -> None:
    release = asyncio.Event()

    async def slow_send(principal_id, event):
        await release.wait()
        return 1

    channel = AsyncMock()
    channel.send = AsyncMock(side_effect=slow_send)
    dispatcher = DeliveryDispatcher(channel)
    dispatcher.dispatch([_notification(1), _notification(2)])
    assert dispatcher.in_flight == 2

    release.set()
    await dispatcher.drain()
    await asyncio.sleep(0)
    assert dispatcher.in_flight == 0
    assert channel.send.await_count == 2
