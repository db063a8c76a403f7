"""Notification engine: persists notification events and fans them out.

Every notification is persisted before it is queued for delivery. The queue
releases deliveries only after the request transaction commits, and delivery
problems never reach the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from workhub.application.dtos.notification import NotificationCreate, NotificationResult
from workhub.application.services.notification_recipients import (
    approver_broadcast,
    direct_target,
    member_broadcast,
    symmetric_pair,
)
from workhub.domain.enums import MembershipScope, NotificationType
from workhub.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from workhub.application.dtos.task import TaskResult
    from workhub.application.interfaces.repositories import (
        IMembershipResolver,
        INotificationRepository,
        IPrincipalDirectory,
    )
    from workhub.application.interfaces.services import IDeliveryQueue
    from workhub.domain.value_objects import Principal

logger = get_logger(__name__)

_MEMBER_ADDED = {
    MembershipScope.SPACE: (
        NotificationType.YOU_WERE_ADDED_TO_SPACE,
        NotificationType.ADD_MEMBER_TO_SPACE,
    ),
    MembershipScope.PROJECT: (
        NotificationType.YOU_WERE_ADDED_TO_PROJECT,
        NotificationType.ADD_MEMBER_TO_PROJECT,
    ),
}
_MEMBER_REMOVED = {
    MembershipScope.SPACE: (
        NotificationType.YOU_WERE_REMOVED_FROM_SPACE,
        NotificationType.REMOVE_MEMBER_FROM_SPACE,
    ),
    MembershipScope.PROJECT: (
        NotificationType.YOU_WERE_REMOVED_FROM_PROJECT,
        NotificationType.REMOVE_MEMBER_FROM_PROJECT,
    ),
}


def task_event_data(task: TaskResult, **extra: Any) -> dict[str, Any]:
    """Denormalized task identifiers carried by every task notification."""
    return {
        "task_id": task.id,
        "task_name": task.name,
        "project_id": task.project_id,
        "space_id": task.space_id,
        **extra,
    }


class NotificationService:
    """Creates notifications for domain events and queues them for delivery."""

    def __init__(
        self,
        notification_repo: INotificationRepository,
        membership: IMembershipResolver,
        directory: IPrincipalDirectory,
        delivery: IDeliveryQueue | None = None,
        approver_roles: frozenset[str] = frozenset(),
    ) -> None:
        self.notification_repo = notification_repo
        self.membership = membership
        self.directory = directory
        self.delivery = delivery
        self.approver_roles = approver_roles

    async def create_notification(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        data: dict[str, Any],
        actor: Principal | None = None,
    ) -> NotificationResult:
        """Persist one notification, then queue it for delivery.

        actor_name is copied from the resolved actor here and never looked up
        again, so later profile changes do not alter past notifications.
        """
        notification = await self.notification_repo.create(
            NotificationCreate(
                recipient_id=recipient_id,
                type=notification_type.value,
                data=data,
                actor_id=actor.id if actor else None,
                actor_name=actor.display_name if actor else None,
            )
        )
        if self.delivery is not None:
            self.delivery.enqueue(notification)
        return notification

    async def notify_many(
        self,
        recipient_ids: Iterable[str],
        notification_type: NotificationType,
        data: dict[str, Any],
        actor: Principal | None = None,
    ) -> list[NotificationResult]:
        """Create one notification per recipient (recipients already fanned out)."""
        created = []
        for recipient_id in recipient_ids:
            created.append(
                await self.create_notification(recipient_id, notification_type, data, actor)
            )
        if created:
            logger.debug(
                "Created %d %s notification(s)", len(created), notification_type.value
            )
        return created

    # ---- Task events ----

    async def notify_task_created(
        self, task: TaskResult, actor: Principal
    ) -> list[NotificationResult]:
        """YOU_WERE_ASSIGNED_TASK to the assignee, CREATE_TASK to the other project members."""
        data = task_event_data(task)
        created = await self.notify_task_assigned(task, actor)
        members = await self.membership.project_member_ids(task.project_id)
        created += await self.notify_many(
            member_broadcast(members, exclude=[actor.id, task.assignee_id]),
            NotificationType.CREATE_TASK,
            data,
            actor,
        )
        return created

    async def notify_task_assigned(
        self, task: TaskResult, actor: Principal
    ) -> list[NotificationResult]:
        return await self.notify_many(
            direct_target(task.assignee_id, actor.id),
            NotificationType.YOU_WERE_ASSIGNED_TASK,
            task_event_data(task),
            actor,
        )

    async def notify_task_updated(
        self, task: TaskResult, actor: Principal, changed_fields: Iterable[str]
    ) -> list[NotificationResult]:
        """UPDATE_TASK to the owner/assignee pair."""
        return await self.notify_many(
            symmetric_pair(task.owner_id, task.assignee_id, actor.id),
            NotificationType.UPDATE_TASK,
            task_event_data(task, changes=list(changed_fields)),
            actor,
        )

    async def notify_task_status_changed(
        self, task: TaskResult, actor: Principal, old_status: str
    ) -> list[NotificationResult]:
        """TASK_STATUS_CHANGED to the owner/assignee pair."""
        return await self.notify_many(
            symmetric_pair(task.owner_id, task.assignee_id, actor.id),
            NotificationType.TASK_STATUS_CHANGED,
            task_event_data(task, new_status=task.status, old_status=old_status),
            actor,
        )

    async def notify_task_pending_approval(
        self, task: TaskResult, actor: Principal
    ) -> list[NotificationResult]:
        """TASK_PENDING_APPROVAL to system approvers and the project's owners."""
        approvers = (
            await self.directory.ids_with_system_roles(self.approver_roles)
            if self.approver_roles
            else []
        )
        owners = await self.membership.project_owner_ids(task.project_id)
        return await self.notify_many(
            approver_broadcast(approvers, owners, actor.id),
            NotificationType.TASK_PENDING_APPROVAL,
            task_event_data(task, assignee_id=task.assignee_id),
            actor,
        )

    async def notify_task_approved(
        self, task: TaskResult, actor: Principal, comment: str | None = None
    ) -> list[NotificationResult]:
        return await self.notify_many(
            direct_target(task.assignee_id, actor.id),
            NotificationType.TASK_APPROVED,
            task_event_data(task, comment=comment),
            actor,
        )

    async def notify_task_rejected(
        self, task: TaskResult, actor: Principal, reason: str
    ) -> list[NotificationResult]:
        return await self.notify_many(
            direct_target(task.assignee_id, actor.id),
            NotificationType.TASK_REJECTED,
            task_event_data(task, reason=reason),
            actor,
        )

    async def notify_task_deleted(
        self, task: TaskResult, actor: Principal
    ) -> list[NotificationResult]:
        """DELETE_TASK to the project members. Call before the task row is removed."""
        members = await self.membership.project_member_ids(task.project_id)
        return await self.notify_many(
            member_broadcast(members, exclude=[actor.id]),
            NotificationType.DELETE_TASK,
            task_event_data(task),
            actor,
        )

    # ---- Space / project events ----

    async def _scope_member_ids(self, scope: MembershipScope, scope_id: str) -> list[str]:
        if scope == MembershipScope.SPACE:
            return await self.membership.space_member_ids(scope_id)
        return await self.membership.project_member_ids(scope_id)

    async def notify_scope_members(
        self,
        scope: MembershipScope,
        scope_id: str,
        notification_type: NotificationType,
        data: dict[str, Any],
        actor: Principal,
        member_ids: Iterable[str] | None = None,
    ) -> list[NotificationResult]:
        """Broadcast a space/project event (e.g. UPDATE_PROJECT) to its members.

        Pass member_ids when the scope is being deleted and its memberships
        can no longer be resolved.
        """
        if member_ids is None:
            member_ids = await self._scope_member_ids(scope, scope_id)
        payload = {f"{scope.value}_id": scope_id, **data}
        return await self.notify_many(
            member_broadcast(member_ids, exclude=[actor.id]),
            notification_type,
            payload,
            actor,
        )

    async def notify_space_updated(
        self, space_id: str, actor: Principal, data: dict[str, Any] | None = None
    ) -> list[NotificationResult]:
        return await self.notify_scope_members(
            MembershipScope.SPACE, space_id, NotificationType.UPDATE_SPACE, data or {}, actor
        )

    async def notify_space_deleted(
        self,
        space_id: str,
        actor: Principal,
        member_ids: Iterable[str],
        data: dict[str, Any] | None = None,
    ) -> list[NotificationResult]:
        """DELETE_SPACE to the members captured before the space was removed."""
        return await self.notify_scope_members(
            MembershipScope.SPACE,
            space_id,
            NotificationType.DELETE_SPACE,
            data or {},
            actor,
            member_ids=member_ids,
        )

    async def notify_project_updated(
        self, project_id: str, actor: Principal, data: dict[str, Any] | None = None
    ) -> list[NotificationResult]:
        return await self.notify_scope_members(
            MembershipScope.PROJECT,
            project_id,
            NotificationType.UPDATE_PROJECT,
            data or {},
            actor,
        )

    async def notify_project_deleted(
        self,
        project_id: str,
        actor: Principal,
        member_ids: Iterable[str],
        data: dict[str, Any] | None = None,
    ) -> list[NotificationResult]:
        """DELETE_PROJECT to the members captured before the project was removed."""
        return await self.notify_scope_members(
            MembershipScope.PROJECT,
            project_id,
            NotificationType.DELETE_PROJECT,
            data or {},
            actor,
            member_ids=member_ids,
        )

    async def notify_member_added(
        self,
        scope: MembershipScope,
        scope_id: str,
        member_id: str,
        actor: Principal,
        data: dict[str, Any] | None = None,
    ) -> list[NotificationResult]:
        """YOU_WERE_ADDED_TO_* to the new member, ADD_MEMBER_TO_* to the others."""
        personal_type, broadcast_type = _MEMBER_ADDED[scope]
        payload = {f"{scope.value}_id": scope_id, "member_id": member_id, **(data or {})}
        created = await self.notify_many(
            direct_target(member_id, actor.id), personal_type, payload, actor
        )
        members = await self._scope_member_ids(scope, scope_id)
        created += await self.notify_many(
            member_broadcast(members, exclude=[actor.id, member_id]),
            broadcast_type,
            payload,
            actor,
        )
        return created

    async def notify_member_removed(
        self,
        scope: MembershipScope,
        scope_id: str,
        member_id: str,
        actor: Principal,
        data: dict[str, Any] | None = None,
    ) -> list[NotificationResult]:
        """YOU_WERE_REMOVED_FROM_* to the removed member, REMOVE_MEMBER_FROM_* to the rest."""
        personal_type, broadcast_type = _MEMBER_REMOVED[scope]
        payload = {f"{scope.value}_id": scope_id, "member_id": member_id, **(data or {})}
        created = await self.notify_many(
            direct_target(member_id, actor.id), personal_type, payload, actor
        )
        members = await self._scope_member_ids(scope, scope_id)
        created += await self.notify_many(
            member_broadcast(members, exclude=[actor.id, member_id]),
            broadcast_type,
            payload,
            actor,
        )
        return created
