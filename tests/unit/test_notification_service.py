"""NotificationService fan-out for space, project and membership events."""

from fakes import U1, U2, U3, U4, Workbench
from workhub.domain.enums import MembershipScope, NotificationType


async def test_create_notification_copies_actor_name_and_queues(bench: Workbench) -> None:
    n = await bench.notifier.create_notification(
        "u2", NotificationType.UPDATE_TASK, {"task_id": "t1"}, U1
    )
    assert n.actor_id == "u1"
    assert n.actor_name == "Una"
    assert n.type == "UPDATE_TASK"
    assert bench.queue.enqueued == [n]


async def test_system_notification_has_no_actor(bench: Workbench) -> None:
    n = await bench.notifier.create_notification("u2", NotificationType.CREATE_SPACE, {})
    assert n.actor_id is None
    assert n.actor_name is None


async def test_project_update_reaches_members_except_actor(bench: Workbench) -> None:
    created = await bench.notifier.notify_project_updated("project-1", U3, {"name": "New"})
    assert [n.recipient_id for n in created] == ["u1", "u2", "u4"]
    assert created[0].data == {"project_id": "project-1", "name": "New"}


async def test_space_delete_uses_captured_members(bench: Workbench) -> None:
    created = await bench.notifier.notify_space_deleted(
        "space-gone", U1, member_ids=["u1", "u2", "u3"]
    )
    assert [n.recipient_id for n in created] == ["u2", "u3"]
    assert all(n.type == "DELETE_SPACE" for n in created)


async def test_member_added_notifies_new_member_and_the_rest(bench: Workbench) -> None:
    created = await bench.notifier.notify_member_added(
        MembershipScope.PROJECT, "project-1", "u4", U3
    )
    personal = [n for n in created if n.type == "YOU_WERE_ADDED_TO_PROJECT"]
    broadcast = [n for n in created if n.type == "ADD_MEMBER_TO_PROJECT"]
    assert [n.recipient_id for n in personal] == ["u4"]
    assert [n.recipient_id for n in broadcast] == ["u1", "u2"]
    assert personal[0].data["member_id"] == "u4"


async def test_member_removed_from_space(bench: Workbench) -> None:
    created = await bench.notifier.notify_member_removed(
        MembershipScope.SPACE, "space-1", "u2", U4
    )
    assert [(n.type, n.recipient_id) for n in created][0] == (
        "YOU_WERE_REMOVED_FROM_SPACE",
        "u2",
    )
    assert "u4" not in [n.recipient_id for n in created]


async def test_without_delivery_queue_notifications_are_only_persisted(
    bench: Workbench,
) -> None:
    bench.notifier.delivery = None
    await bench.notifier.notify_task_approved(bench.tasks.put(), U3, "ok")
    assert len(bench.notifications.rows) == 1
    assert bench.queue.enqueued == []


async def test_pending_approval_without_approver_roles_goes_to_owners(
    bench: Workbench,
) -> None:
    bench.notifier.approver_roles = frozenset()
    created = await bench.notifier.notify_task_pending_approval(bench.tasks.put(), U2)
    assert [n.recipient_id for n in created] == ["u3"]
