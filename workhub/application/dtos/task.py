"""DTOs for tasks (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from workhub.domain.enums import TaskPriority, TaskStatus
from workhub.domain.value_objects import Attachment


@dataclass(frozen=True)
class TaskResult:
    """Task read model returned by the task repository."""

    id: str
    space_id: str
    project_id: str
    owner_id: str
    assignee_id: str
    name: str
    description: str | None
    status: str
    priority: str
    start_date: datetime | None
    due_date: datetime | None
    completed_at: datetime | None
    approved_by: str | None
    approved_at: datetime | None
    rejected_by: str | None
    rejected_at: datetime | None
    review_comment: str | None
    attachments: tuple[Attachment, ...]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CreateTaskCommand:
    """Input for creating a task. assignee_id defaults to the creator."""

    space_id: str
    project_id: str
    name: str
    description: str | None = None
    assignee_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: datetime | None = None
    due_date: datetime | None = None


@dataclass(frozen=True)
class TaskToPersist:
    """Fully resolved task row handed to the repository on create."""

    space_id: str
    project_id: str
    owner_id: str
    assignee_id: str
    name: str
    description: str | None
    priority: str
    start_date: datetime | None
    due_date: datetime | None
    status: str = TaskStatus.PENDING.value


@dataclass(frozen=True)
class AttachmentUpload:
    """A file received in the request, not yet stored."""

    original_name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class TaskUpdateOutcome:
    """Result of update_task.

    status_rewritten is True when an assignee asked for COMPLETED and the task
    was submitted for approval instead; requested_status then holds COMPLETED.
    """

    task: TaskResult
    changed_fields: tuple[str, ...] = ()
    status_rewritten: bool = False
    requested_status: str | None = None


@dataclass(frozen=True)
class TaskStats:
    """Task counters for a user (optionally limited to one space)."""

    pending: int = 0
    processing: int = 0
    pending_approval: int = 0
    completed: int = 0
    overdue: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.processing + self.pending_approval + self.completed


@dataclass(frozen=True)
class TaskListQuery:
    """Filters for listing tasks visible to a user."""

    project_id: str | None = None
    status: str | None = None
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class CalendarDay:
    """Tasks due on one calendar day."""

    day: date
    tasks: tuple[TaskResult, ...]
