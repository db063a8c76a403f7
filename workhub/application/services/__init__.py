"""Application services: task permission engine and notification fan-out rules."""

from workhub.application.services.notification_recipients import (
    approver_broadcast,
    direct_target,
    member_broadcast,
    symmetric_pair,
    unique_recipients,
)
from workhub.application.services.task_permission_service import (
    TaskAccess,
    TaskUpdatePlan,
    plan_task_update,
    require_task_access,
    resolve_task_access,
)

__all__ = [
    "TaskAccess",
    "TaskUpdatePlan",
    "approver_broadcast",
    "direct_target",
    "member_broadcast",
    "plan_task_update",
    "require_task_access",
    "resolve_task_access",
    "symmetric_pair",
    "unique_recipients",
]
