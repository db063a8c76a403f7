"""Task workflow: create, update, submit status, approve, reject and delete.

Every mutation is authorized and validated before the first write. Status
writes go through a conditional update guarded on the status read at the
start, so two concurrent requests cannot both act on the same pre-change
status. Notifications are created in the same unit of work, after the task
write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from workhub.application.dtos.task import (
    AttachmentUpload,
    CreateTaskCommand,
    TaskResult,
    TaskToPersist,
    TaskUpdateOutcome,
)
from workhub.application.services.task_permission_service import (
    UPDATABLE_FIELDS,
    TaskUpdatePlan,
    plan_task_update,
    resolve_task_access,
)
from workhub.domain.enums import AccessTier, MemberRole, MembershipScope, TaskPriority, TaskStatus
from workhub.domain.exceptions import (
    AuthorizationException,
    InvalidStateException,
    MembershipNotFoundException,
    ResourceNotFoundException,
    ValidationException,
)
from workhub.domain.state_machine import completion_fields, validate_transition
from workhub.domain.value_objects import Attachment
from workhub.shared.telemetry.logging import get_logger
from workhub.shared.telemetry.tracing import traced
from workhub.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from workhub.application.interfaces.repositories import (
        IMembershipResolver,
        ITaskRepository,
    )
    from workhub.application.interfaces.services import IAttachmentStorage
    from workhub.application.use_cases.notifications import NotificationService
    from workhub.domain.value_objects import Principal

logger = get_logger(__name__)


def _parse_priority(value: Any) -> str:
    try:
        return TaskPriority(value).value
    except ValueError as e:
        raise ValidationException(
            f"Invalid priority '{value}'. Must be one of: {', '.join(TaskPriority.values())}",
            field="priority",
        ) from e


def _parse_attachments(items: Any) -> list[Attachment]:
    """Normalize client-supplied retained attachments."""
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        raise ValidationException("attachments must be a list", field="attachments")
    parsed: list[Attachment] = []
    for item in items:
        if isinstance(item, Attachment):
            parsed.append(item)
            continue
        try:
            parsed.append(Attachment.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationException(
                f"Invalid attachment entry: {e}", field="attachments"
            ) from e
    return parsed


class TaskWorkflowService:
    """Orchestrates task mutations through the permission engine and the task store."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        membership: IMembershipResolver,
        notifications: NotificationService,
        attachment_storage: IAttachmentStorage | None = None,
        approver_roles: frozenset[str] = frozenset(),
        allow_reopen_completed: bool = False,
    ) -> None:
        self.task_repo = task_repo
        self.membership = membership
        self.notifications = notifications
        self.attachment_storage = attachment_storage
        self.approver_roles = approver_roles
        self.allow_reopen_completed = allow_reopen_completed

    async def _get_task(self, task_id: str) -> TaskResult:
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def _require_membership(
        self, principal_id: str, space_id: str, project_id: str
    ) -> tuple[str, str]:
        """Return (space_role, project_role); raise MembershipNotFoundException if either is missing."""
        space_role = await self.membership.space_role(principal_id, space_id)
        if space_role is None:
            raise MembershipNotFoundException(
                MembershipScope.SPACE.value, space_id, principal_id
            )
        project_role = await self.membership.project_role(principal_id, project_id)
        if project_role is None:
            raise MembershipNotFoundException(
                MembershipScope.PROJECT.value, project_id, principal_id
            )
        return space_role, project_role

    async def _require_approver(self, task: TaskResult, actor: Principal) -> None:
        if actor.has_system_role(self.approver_roles):
            return
        project_role = await self.membership.project_role(actor.id, task.project_id)
        if project_role == MemberRole.OWNER.value:
            return
        raise AuthorizationException(
            resource="task",
            action="approve",
            message="Only a project manager or the project owner can approve or reject tasks",
        )

    @traced("task.create")
    async def create_task(
        self, command: CreateTaskCommand, actor: Principal
    ) -> TaskResult:
        """Create a task in PENDING. The assignee defaults to the creator.

        Raises:
            ValidationException: Empty name.
            MembershipNotFoundException: Creator or assignee is not a member of the space and project.
        """
        name = (command.name or "").strip()
        if not name:
            raise ValidationException("Task name is required", field="name")
        await self._require_membership(actor.id, command.space_id, command.project_id)
        assignee_id = command.assignee_id or actor.id
        if assignee_id != actor.id:
            await self._require_membership(
                assignee_id, command.space_id, command.project_id
            )

        task = await self.task_repo.create(
            TaskToPersist(
                space_id=command.space_id,
                project_id=command.project_id,
                owner_id=actor.id,
                assignee_id=assignee_id,
                name=name,
                description=command.description,
                priority=_parse_priority(command.priority),
                start_date=command.start_date,
                due_date=command.due_date,
            )
        )
        await self.notifications.notify_task_created(task, actor)
        logger.info("Task %s created in project %s by %s", task.id, task.project_id, actor.id)
        return task

    @traced("task.update")
    async def update_task(
        self,
        task_id: str,
        changes: dict[str, Any],
        actor: Principal,
        uploads: list[AttachmentUpload] | None = None,
    ) -> TaskUpdateOutcome:
        """Apply a partial update filtered by the actor's tier.

        Attachments: the stored list becomes the retained list sent in
        changes["attachments"] followed by the newly uploaded files. When
        files are uploaded without a retained list, they are appended to the
        current attachments.

        An assignee asking for COMPLETED submits the task for approval
        instead; the outcome reports status_rewritten=True.

        Raises:
            ResourceNotFoundException: Task does not exist.
            AuthorizationException: Actor has no access to the task.
            FieldPermissionException: Payload has fields the actor may not write.
            InvalidStateException: Status transition not allowed or status changed concurrently.
            MembershipNotFoundException: New assignee is not a member of the space and project.
            ValidationException: Malformed values.
        """
        uploads = uploads or []
        task = await self._get_task(task_id)
        space_role = await self.membership.space_role(actor.id, task.space_id)
        project_role = await self.membership.project_role(actor.id, task.project_id)
        access = resolve_task_access(task, actor.id, space_role, project_role)

        request = dict(changes)
        if uploads and "attachments" not in request:
            request["attachments"] = list(task.attachments)
        plan = plan_task_update(access, request)

        values: dict[str, Any] = {}
        current_status = TaskStatus(task.status)
        new_status: TaskStatus | None = plan.changes.get("status")
        if new_status is not None:
            validate_transition(
                current_status,
                new_status,
                elevated=plan.tier == AccessTier.ELEVATED,
                allow_reopen_completed=self.allow_reopen_completed,
            )
            values["status"] = new_status.value
            values.update(completion_fields(current_status, new_status, utc_now()))

        for key in ("name", "description", "start_date", "due_date"):
            if key in plan.changes:
                values[key] = plan.changes[key]
        if "name" in values:
            values["name"] = (values["name"] or "").strip()
            if not values["name"]:
                raise ValidationException("Task name is required", field="name")
        if "priority" in plan.changes:
            values["priority"] = _parse_priority(plan.changes["priority"])
        if "assignee_id" in plan.changes:
            new_assignee = plan.changes["assignee_id"]
            if not new_assignee:
                raise ValidationException("assignee_id cannot be empty", field="assignee_id")
            if new_assignee != task.assignee_id:
                await self._require_membership(new_assignee, task.space_id, task.project_id)
            values["assignee_id"] = new_assignee

        stored: list[Attachment] = []
        if "attachments" in plan.changes:
            retained = _parse_attachments(plan.changes["attachments"])
            if uploads:
                if self.attachment_storage is None:
                    raise ValidationException("File uploads are not enabled", field="attachments")
                self.attachment_storage.validate(uploads)

        changed_fields = tuple(f for f in UPDATABLE_FIELDS if f in plan.changes)
        if not values and "attachments" not in plan.changes:
            return TaskUpdateOutcome(task=task)

        try:
            if "attachments" in plan.changes:
                for upload in uploads or ():
                    stored.append(await self.attachment_storage.store(upload))
                values["attachments"] = [a.to_dict() for a in retained + stored]
            updated = await self._write_update(task, current_status, values)
            await self._notify_update(
                task, updated, actor, plan, current_status, new_status, changed_fields
            )
        except Exception:
            # Files already written would be orphaned by the failed update.
            if stored:
                await self.attachment_storage.discard(stored)
            raise

        return TaskUpdateOutcome(
            task=updated,
            changed_fields=changed_fields,
            status_rewritten=plan.status_rewritten,
            requested_status=plan.requested_status,
        )

    async def _write_update(
        self, task: TaskResult, current_status: TaskStatus, values: dict[str, Any]
    ) -> TaskResult:
        if "status" in values:
            updated = await self.task_repo.update_if_status(
                task.id, [current_status.value], values
            )
            if updated is None:
                raise InvalidStateException(
                    "Task status changed concurrently; reload the task and retry",
                    current_status=current_status.value,
                    requested_status=values["status"],
                )
            return updated
        updated = await self.task_repo.update(task.id, values)
        if updated is None:
            raise ResourceNotFoundException("task", task.id)
        return updated

    async def _notify_update(
        self,
        task: TaskResult,
        updated: TaskResult,
        actor: Principal,
        plan: TaskUpdatePlan,
        current_status: TaskStatus,
        new_status: TaskStatus | None,
        changed_fields: tuple[str, ...],
    ) -> None:
        await self.notifications.notify_task_updated(updated, actor, changed_fields)
        if plan.status_rewritten:
            await self.notifications.notify_task_pending_approval(updated, actor)
            logger.info(
                "Task %s: COMPLETED requested by assignee %s, submitted for approval",
                task.id,
                actor.id,
            )
        elif new_status is not None and new_status != current_status:
            await self.notifications.notify_task_status_changed(
                updated, actor, current_status.value
            )
            if new_status == TaskStatus.PENDING_APPROVAL:
                await self.notifications.notify_task_pending_approval(updated, actor)
        if updated.assignee_id != task.assignee_id:
            await self.notifications.notify_task_assigned(updated, actor)


    async def submit_task_status(
        self, task_id: str, status: str | TaskStatus, actor: Principal
    ) -> TaskUpdateOutcome:
        """Status-only update (what an assignee sends when moving work along)."""
        return await self.update_task(task_id, {"status": status}, actor)

    @traced("task.approve")
    async def approve_task(
        self, task_id: str, actor: Principal, comment: str | None = None
    ) -> TaskResult:
        """Complete a task pending approval.

        Raises:
            ResourceNotFoundException: Task does not exist.
            AuthorizationException: Actor is neither an approver nor the project owner.
            InvalidStateException: Task is not PENDING_APPROVAL (nothing is written).
        """
        task = await self._get_task(task_id)
        await self._require_approver(task, actor)
        if task.status != TaskStatus.PENDING_APPROVAL.value:
            raise InvalidStateException(
                "Task is not pending approval", current_status=task.status
            )
        now = utc_now()
        updated = await self.task_repo.update_if_status(
            task.id,
            [TaskStatus.PENDING_APPROVAL.value],
            {
                "status": TaskStatus.COMPLETED.value,
                "completed_at": now,
                "approved_by": actor.id,
                "approved_at": now,
                "review_comment": comment,
            },
        )
        if updated is None:
            raise InvalidStateException("Task is not pending approval")
        await self.notifications.notify_task_approved(updated, actor, comment)
        logger.info("Task %s approved by %s", task.id, actor.id)
        return updated

    @traced("task.reject")
    async def reject_task(self, task_id: str, actor: Principal, reason: str) -> TaskResult:
        """Send a task pending approval back to PROCESSING.

        Raises:
            ValidationException: Empty reason.
            ResourceNotFoundException: Task does not exist.
            AuthorizationException: Actor is neither an approver nor the project owner.
            InvalidStateException: Task is not PENDING_APPROVAL (nothing is written).
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationException("A rejection reason is required", field="reason")
        task = await self._get_task(task_id)
        await self._require_approver(task, actor)
        if task.status != TaskStatus.PENDING_APPROVAL.value:
            raise InvalidStateException(
                "Task is not pending approval", current_status=task.status
            )
        now = utc_now()
        updated = await self.task_repo.update_if_status(
            task.id,
            [TaskStatus.PENDING_APPROVAL.value],
            {
                "status": TaskStatus.PROCESSING.value,
                "completed_at": None,
                "rejected_by": actor.id,
                "rejected_at": now,
                "review_comment": reason,
            },
        )
        if updated is None:
            raise InvalidStateException("Task is not pending approval")
        await self.notifications.notify_task_rejected(updated, actor, reason)
        logger.info("Task %s rejected by %s", task.id, actor.id)
        return updated

    @traced("task.delete")
    async def delete_task(self, task_id: str, actor: Principal) -> None:
        """Delete a task (owner, assignee, space owner or project owner).

        Project members are notified first, with the task's identifiers copied
        into the notification data.
        """
        task = await self._get_task(task_id)
        space_role = await self.membership.space_role(actor.id, task.space_id)
        project_role = await self.membership.project_role(actor.id, task.project_id)
        access = resolve_task_access(task, actor.id, space_role, project_role)
        if access.tier is None:
            raise AuthorizationException(
                resource="task",
                action="delete",
                message="Only the task owner, assignee, or a space/project owner can delete this task",
            )
        await self.notifications.notify_task_deleted(task, actor)
        await self.task_repo.delete(task.id)
        logger.info("Task %s deleted by %s", task.id, actor.id)
