"""Notification repository and backlog provider against SQLite."""

from datetime import UTC, datetime, timedelta

import pytest

from workhub.api.websocket import DeliveryChannelRegistry
from workhub.application.dtos.notification import NotificationCreate
from workhub.infrastructure.persistence.models import Notification
from workhub.infrastructure.persistence.repositories import NotificationRepository
from workhub.infrastructure.services import SessionBacklogProvider

pytestmark = pytest.mark.integration


def _create(recipient_id: str, type_: str = "UPDATE_TASK", **data) -> NotificationCreate:
    return NotificationCreate(
        recipient_id=recipient_id,
        type=type_,
        data=data or {"task_id": "t1"},
        actor_id="user-alice",
        actor_name="Alice",
    )


async def test_create_and_list_for_recipient(db_session, world) -> None:
    repo = NotificationRepository(db_session)
    created = await repo.create(_create(world.bob))
    await repo.create(_create(world.bob, "CREATE_TASK"))
    await repo.create(_create(world.carol))

    assert created.is_read is False
    assert created.actor_name == "Alice"
    assert created.data == {"task_id": "t1"}

    items, total = await repo.list_for_recipient(world.bob, offset=0, limit=1)
    assert total == 2
    assert len(items) == 1

    items, total = await repo.list_for_recipient(
        world.bob, offset=0, limit=10, notification_type="CREATE_TASK"
    )
    assert total == 1
    assert items[0].type == "CREATE_TASK"


async def test_mark_read_keeps_first_timestamp(db_session, world) -> None:
    repo = NotificationRepository(db_session)
    n = await repo.create(_create(world.bob))
    first = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)

    read = await repo.mark_read(n.id, first)
    again = await repo.mark_read(n.id, first + timedelta(hours=1))

    assert read is not None and read.is_read
    assert again is not None and again.read_at == first
    assert await repo.mark_read("missing", first) is None


async def test_mark_all_read_counts_only_unread(db_session, world) -> None:
    repo = NotificationRepository(db_session)
    n1 = await repo.create(_create(world.bob))
    await repo.create(_create(world.bob))
    await repo.create(_create(world.carol))
    await repo.mark_read(n1.id, datetime.now(UTC))

    assert await repo.mark_all_read(world.bob, datetime.now(UTC)) == 1
    assert await repo.list_unread(world.bob) == []
    assert len(await repo.list_unread(world.carol)) == 1


async def test_find_duplicates_keeps_oldest_in_window(db_session, world) -> None:
    t0 = datetime(2025, 2, 1, 10, 0, 0, tzinfo=UTC)

    def row(seconds: float, type_: str = "UPDATE_TASK") -> Notification:
        return Notification(
            recipient_id=world.bob,
            actor_id=world.alice,
            type=type_,
            data={"task_id": "t1", "project_id": world.project},
            is_read=False,
            created_at=t0 + timedelta(seconds=seconds),
        )

    original, burst, other_type, much_later = row(0), row(4), row(1, "CREATE_TASK"), row(60)
    db_session.add_all([original, burst, other_type, much_later])
    await db_session.flush()

    repo = NotificationRepository(db_session)
    duplicates = await repo.find_duplicates(10)
    assert duplicates == [burst.id]

    assert await repo.delete_many(duplicates) == 1
    assert await repo.delete_many([]) == 0
    _, total = await repo.list_for_recipient(world.bob, offset=0, limit=10)
    assert total == 3


async def test_backlog_replays_only_recent_unread(session_factory, seeded) -> None:
    """Three unread from the last hour and two from 40 hours ago: only the three are replayed."""
    now = datetime.now(UTC)
    async with session_factory() as session:
        async with session.begin():
            for minutes in (10, 20, 30):
                session.add(
                    Notification(
                        recipient_id=seeded.bob,
                        type="UPDATE_TASK",
                        data={"minutes": minutes},
                        is_read=False,
                        created_at=now - timedelta(minutes=minutes),
                    )
                )
            for _ in range(2):
                session.add(
                    Notification(
                        recipient_id=seeded.bob,
                        type="UPDATE_TASK",
                        data={"minutes": 2400},
                        is_read=False,
                        created_at=now - timedelta(hours=40),
                    )
                )

    provider = SessionBacklogProvider(session_factory, window_hours=24, limit=10)
    backlog = await provider.fetch_backlog(seeded.bob)
    assert [n.data["minutes"] for n in backlog] == [10, 20, 30]

    class _Socket:
        def __init__(self) -> None:
            self.sent: list[dict] = []

        async def accept(self) -> None:
            pass

        async def send_json(self, data: dict) -> None:
            self.sent.append(data)

    socket = _Socket()
    replayed = await DeliveryChannelRegistry(provider).connect(socket, seeded.bob)
    assert replayed == 3
    assert all(event["type"] == "notification" for event in socket.sent)
