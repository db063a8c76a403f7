"""Field-level authorization for task updates.

Pure functions: given the task, the actor and the actor's space/project roles,
decide which tier the actor reaches and which fields of an update payload may
be written. Tiers, highest first:

1. Space or project OWNER: any field, including status = COMPLETED.
2. Task owner: any field except status.
3. Task assignee: only status and attachments. COMPLETED is turned into
   PENDING_APPROVAL (submission for review) instead of being rejected.

A principal who is both task owner and assignee is handled as owner unless
also elevated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from workhub.domain.enums import AccessTier, MemberRole, TaskStatus
from workhub.domain.exceptions import (
    AuthorizationException,
    FieldPermissionException,
    ValidationException,
)
from workhub.domain.state_machine import parse_status

if TYPE_CHECKING:
    from workhub.application.dtos.task import TaskResult

UPDATABLE_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "assignee_id",
    "priority",
    "start_date",
    "due_date",
    "status",
    "attachments",
)
ASSIGNEE_FIELDS: frozenset[str] = frozenset({"status", "attachments"})

OWNER_STATUS_MESSAGE = (
    "As task owner, you cannot update task status. "
    "Only the assignee can update status or an approver can approve."
)


@dataclass(frozen=True)
class TaskAccess:
    """The four role facts the permission engine decides on."""

    is_task_owner: bool
    is_task_assignee: bool
    is_space_owner: bool
    is_project_owner: bool

    @property
    def elevated(self) -> bool:
        return self.is_space_owner or self.is_project_owner

    @property
    def tier(self) -> AccessTier | None:
        """Highest tier reached, or None when the actor has no access."""
        if self.elevated:
            return AccessTier.ELEVATED
        if self.is_task_owner:
            return AccessTier.OWNER
        if self.is_task_assignee:
            return AccessTier.ASSIGNEE
        return None


@dataclass(frozen=True)
class TaskUpdatePlan:
    """Filtered payload the workflow service may write.

    When status_rewritten is True, changes["status"] is PENDING_APPROVAL and
    requested_status holds what the client asked for.
    """

    tier: AccessTier
    changes: dict[str, Any] = field(default_factory=dict)
    status_rewritten: bool = False
    requested_status: str | None = None


def resolve_task_access(
    task: TaskResult,
    actor_id: str,
    space_role: str | None,
    project_role: str | None,
) -> TaskAccess:
    """Compute the role facts for actor on task."""
    return TaskAccess(
        is_task_owner=task.owner_id == actor_id,
        is_task_assignee=task.assignee_id == actor_id,
        is_space_owner=space_role == MemberRole.OWNER.value,
        is_project_owner=project_role == MemberRole.OWNER.value,
    )


def require_task_access(access: TaskAccess) -> AccessTier:
    """Return the actor's tier or raise AuthorizationException when there is none."""
    tier = access.tier
    if tier is None:
        raise AuthorizationException(
            resource="task",
            action="update",
            message="You are not the owner or assignee of this task, nor an owner of its space or project",
        )
    return tier


def plan_task_update(access: TaskAccess, changes: dict[str, Any]) -> TaskUpdatePlan:
    """Filter an update payload for the actor's tier.

    Args:
        access: Role facts from resolve_task_access.
        changes: Fields the client sent (only keys present in the request).

    Returns:
        TaskUpdatePlan with the fields to write.

    Raises:
        AuthorizationException: Actor has no access to the task.
        FieldPermissionException: Payload carries fields the tier may not write.
        ValidationException: Unknown field or invalid status value.
    """
    tier = require_task_access(access)
    unknown = [k for k in changes if k not in UPDATABLE_FIELDS]
    if unknown:
        raise ValidationException(
            f"Unknown task field(s): {', '.join(unknown)}", field=unknown[0]
        )

    filtered = dict(changes)
    if "status" in filtered:
        filtered["status"] = parse_status(filtered["status"])

    if tier == AccessTier.ELEVATED:
        return TaskUpdatePlan(tier=tier, changes=filtered)

    if tier == AccessTier.OWNER:
        if "status" in filtered:
            raise FieldPermissionException(OWNER_STATUS_MESSAGE, ["status"])
        return TaskUpdatePlan(tier=tier, changes=filtered)

    forbidden = [k for k in filtered if k not in ASSIGNEE_FIELDS]
    if forbidden:
        raise FieldPermissionException(
            "As task assignee, you can only update status and attachments. "
            f"Cannot update: {', '.join(forbidden)}",
            forbidden,
        )
    if filtered.get("status") == TaskStatus.COMPLETED:
        filtered["status"] = TaskStatus.PENDING_APPROVAL
        return TaskUpdatePlan(
            tier=tier,
            changes=filtered,
            status_rewritten=True,
            requested_status=TaskStatus.COMPLETED.value,
        )
    return TaskUpdatePlan(tier=tier, changes=filtered)
