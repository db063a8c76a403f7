"""Task status state machine and the completed_at invariant."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from workhub.domain.enums import TaskStatus
from workhub.domain.exceptions import InvalidStateException, ValidationException

TASK_ALLOWED_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {
        TaskStatus.PROCESSING,
        TaskStatus.PENDING_APPROVAL,
        TaskStatus.COMPLETED,
    },
    TaskStatus.PROCESSING: {
        TaskStatus.PENDING,
        TaskStatus.PENDING_APPROVAL,
        TaskStatus.COMPLETED,
    },
    TaskStatus.PENDING_APPROVAL: {
        TaskStatus.PENDING,
        TaskStatus.PROCESSING,
        TaskStatus.COMPLETED,
    },
    TaskStatus.COMPLETED: set(),
}

# Only reachable by elevated actors and only when reopening is enabled.
REOPEN_TRANSITIONS: set[TaskStatus] = {
    TaskStatus.PENDING,
    TaskStatus.PROCESSING,
    TaskStatus.PENDING_APPROVAL,
}


def parse_status(value: str | TaskStatus) -> TaskStatus:
    """Return value as TaskStatus. Raises ValidationException for unknown values."""
    try:
        return TaskStatus(value)
    except ValueError as e:
        raise ValidationException(
            f"Invalid task status '{value}'. Must be one of: {', '.join(TaskStatus.values())}",
            field="status",
        ) from e


def can_transition(
    source: TaskStatus,
    target: TaskStatus,
    *,
    elevated: bool = False,
    allow_reopen_completed: bool = False,
) -> bool:
    if source == target:
        return True
    if source == TaskStatus.COMPLETED:
        return elevated and allow_reopen_completed and target in REOPEN_TRANSITIONS
    return target in TASK_ALLOWED_TRANSITIONS.get(source, set())


def validate_transition(
    source: TaskStatus,
    target: TaskStatus,
    *,
    elevated: bool = False,
    allow_reopen_completed: bool = False,
) -> None:
    """Raise InvalidStateException if source -> target is not allowed."""
    if not can_transition(
        source,
        target,
        elevated=elevated,
        allow_reopen_completed=allow_reopen_completed,
    ):
        raise InvalidStateException(
            f"Cannot change task status from {source.value} to {target.value}",
            current_status=source.value,
            requested_status=target.value,
        )


def completion_fields(
    source: TaskStatus, target: TaskStatus, now: datetime
) -> dict[str, Any]:
    """Return the completed_at change that keeps completed_at set iff status is COMPLETED."""
    if source == target:
        return {}
    if target == TaskStatus.COMPLETED:
        return {"completed_at": now}
    if source == TaskStatus.COMPLETED:
        return {"completed_at": None}
    return {}
