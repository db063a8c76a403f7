"""Task repository against SQLite; session is rolled back after each test."""

from datetime import UTC, datetime, timedelta

import pytest

from workhub.application.dtos.task import TaskListQuery, TaskToPersist
from workhub.domain.value_objects import Attachment
from workhub.infrastructure.persistence.repositories import TaskRepository

pytestmark = pytest.mark.integration


def _new(world, **overrides) -> TaskToPersist:
    fields = {
        "space_id": world.space,
        "project_id": world.project,
        "owner_id": world.alice,
        "assignee_id": world.bob,
        "name": "Quarterly report",
        "description": None,
        "priority": "MEDIUM",
        "start_date": None,
        "due_date": None,
    }
    fields.update(overrides)
    return TaskToPersist(**fields)


async def test_create_and_get_by_id(db_session, world) -> None:
    repo = TaskRepository(db_session)
    due = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
    created = await repo.create(_new(world, due_date=due))
    assert created.id
    assert created.status == "PENDING"
    assert created.attachments == ()
    assert created.created_at.tzinfo is not None

    found = await repo.get_by_id(created.id)
    assert found is not None
    assert found.due_date == due
    assert await repo.get_by_id("missing") is None


async def test_update_stores_attachments_in_order(db_session, world) -> None:
    repo = TaskRepository(db_session)
    task = await repo.create(_new(world))
    files = [
        Attachment(filename=f"tasks/attachments/{n}", original_name=n, url=f"/files/{n}", size=1, mimetype="application/pdf")
        for n in ("b.pdf", "a.pdf", "c.pdf")
    ]
    updated = await repo.update(task.id, {"attachments": [f.to_dict() for f in files]})
    assert updated is not None
    assert [a.original_name for a in updated.attachments] == ["b.pdf", "a.pdf", "c.pdf"]
    assert await repo.update("missing", {"name": "x"}) is None


async def test_update_if_status_is_guarded(db_session, world) -> None:
    repo = TaskRepository(db_session)
    task = await repo.create(_new(world))

    assert await repo.update_if_status(task.id, ["PROCESSING"], {"status": "COMPLETED"}) is None
    unchanged = await repo.get_by_id(task.id)
    assert unchanged is not None and unchanged.status == "PENDING"

    moved = await repo.update_if_status(task.id, ["PENDING"], {"status": "PROCESSING"})
    assert moved is not None
    assert moved.status == "PROCESSING"
    assert moved.updated_at >= task.updated_at


async def test_delete(db_session, world) -> None:
    repo = TaskRepository(db_session)
    task = await repo.create(_new(world))
    assert await repo.delete(task.id)
    assert not await repo.delete(task.id)
    assert await repo.get_by_id(task.id) is None


async def test_list_for_user_filters(db_session, world) -> None:
    repo = TaskRepository(db_session)
    await repo.create(_new(world, owner_id=world.alice, assignee_id=world.bob))
    await repo.create(_new(world, owner_id=world.carol, assignee_id=world.alice))
    await repo.create(_new(world, owner_id=world.carol, assignee_id=world.bob))
    await repo.create(
        _new(world, owner_id=world.alice, assignee_id=world.alice, project_id=world.side_project)
    )

    tasks, total = await repo.list_for_user(world.alice, TaskListQuery())
    assert total == 3

    tasks, total = await repo.list_for_user(
        world.alice, TaskListQuery(project_id=world.project, limit=1)
    )
    assert total == 2
    assert len(tasks) == 1

    _, total = await repo.list_for_user(world.alice, TaskListQuery(status="COMPLETED"))
    assert total == 0


async def test_list_pending_approval_scoping(db_session, world) -> None:
    repo = TaskRepository(db_session)
    for project_id in (world.project, world.side_project):
        task = await repo.create(_new(world, project_id=project_id))
        await repo.update(task.id, {"status": "PENDING_APPROVAL"})
    await repo.create(_new(world))

    _, total_all = await repo.list_pending_approval(None, 0, 10)
    side, total_side = await repo.list_pending_approval([world.side_project], 0, 10)

    assert total_all == 2
    assert total_side == 1
    assert side[0].project_id == world.side_project
    assert await repo.list_pending_approval([], 0, 10) == ([], 0)


async def test_count_stats_covers_owned_projects_and_own_assignments(db_session, world) -> None:
    repo = TaskRepository(db_session)
    now = datetime.now(UTC)
    await repo.create(_new(world, assignee_id=world.alice, due_date=now - timedelta(days=1)))
    other = await repo.create(_new(world, assignee_id=world.bob))
    await repo.update(other.id, {"status": "PROCESSING"})
    waiting = await repo.create(_new(world, project_id=world.side_project))
    await repo.update(waiting.id, {"status": "PENDING_APPROVAL"})
    done = await repo.create(
        _new(world, project_id=world.side_project, assignee_id=world.alice, due_date=now - timedelta(days=3))
    )
    await repo.update(done.id, {"status": "COMPLETED", "completed_at": now})

    stats = await repo.count_stats(world.alice, [world.side_project], [world.project], now)

    assert (stats.pending, stats.processing, stats.pending_approval, stats.completed) == (1, 0, 1, 1)
    assert stats.overdue == 1
    assert stats.total == 3


async def test_count_stats_with_empty_scope(db_session, world) -> None:
    stats = await TaskRepository(db_session).count_stats(world.outsider, [], [], datetime.now(UTC))
    assert stats.total == 0


async def test_list_with_due_date(db_session, world) -> None:
    repo = TaskRepository(db_session)
    later = datetime(2025, 5, 2, tzinfo=UTC)
    sooner = datetime(2025, 5, 1, tzinfo=UTC)
    await repo.create(_new(world, due_date=later, assignee_id=world.bob))
    await repo.create(_new(world, due_date=sooner, assignee_id=world.carol))
    await repo.create(_new(world))

    everyone = await repo.list_with_due_date(world.project)
    assert [t.due_date for t in everyone] == [sooner, later]
    only_bob = await repo.list_with_due_date(world.project, world.bob)
    assert [t.assignee_id for t in only_bob] == [world.bob]
