"""Task API schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator

from workhub.application.dtos.task import CalendarDay, TaskResult, TaskStats
from workhub.domain.enums import TaskPriority, TaskStatus
from workhub.schemas.common import PageMeta, ensure_aware_datetime


class AttachmentSchema(BaseModel):
    """Attachment record as stored on the task."""

    model_config = ConfigDict(from_attributes=True)

    filename: str = Field(..., min_length=1)
    original_name: str
    url: str
    size: int = Field(..., ge=0)
    mimetype: str
    uploaded_at: datetime | None = None


class TaskCreateRequest(BaseModel):
    """Payload for POST /tasks. assignee_id defaults to the caller."""

    space_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    assignee_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: AwareDatetime | None = None
    due_date: AwareDatetime | None = None

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def dates_aware(cls, v: Any) -> Any:
        return ensure_aware_datetime(v)


class TaskUpdateRequest(BaseModel):
    """Partial update for PATCH /tasks/{id}. Only fields present in the body are applied.

    Values are not enum-checked here so the permission engine can report
    fields the caller may not write before anything else.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    assignee_id: str | None = None
    priority: str | None = None
    start_date: AwareDatetime | None = None
    due_date: AwareDatetime | None = None
    status: str | None = None
    attachments: list[AttachmentSchema] | None = None

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def dates_aware(cls, v: Any) -> Any:
        return ensure_aware_datetime(v)

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, attachments as plain dicts."""
        return self.model_dump(include=self.model_fields_set)


class TaskStatusRequest(BaseModel):
    status: str = Field(..., min_length=1)


class TaskApproveRequest(BaseModel):
    comment: str | None = None


class TaskRejectRequest(BaseModel):
    reason: str = Field(..., description="Why the task is sent back; must not be blank")


class TaskResponse(BaseModel):
    """Task representation returned by every task endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    space_id: str
    project_id: str
    owner_id: str
    assignee_id: str
    name: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    start_date: datetime | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    review_comment: str | None = None
    attachments: list[AttachmentSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_result(cls, task: TaskResult) -> "TaskResponse":
        return cls.model_validate(task)


class TaskUpdateResponse(BaseModel):
    """Update outcome. status_rewritten is true when COMPLETED was turned into a submission for approval."""

    task: TaskResponse
    changed_fields: list[str] = Field(default_factory=list)
    status_rewritten: bool = False
    requested_status: str | None = None
    message: str | None = None


class TaskListResponse(BaseModel):
    items: list[TaskResponse]
    meta: PageMeta


class TaskStatsResponse(BaseModel):
    """Counters for the caller's tasks, optionally limited to one space."""

    model_config = ConfigDict(from_attributes=True)

    pending: int
    processing: int
    pending_approval: int
    completed: int
    overdue: int
    total: int

    @classmethod
    def from_stats(cls, stats: TaskStats) -> "TaskStatsResponse":
        return cls.model_validate(stats)


class CalendarDayResponse(BaseModel):
    day: date
    tasks: list[TaskResponse]

    @classmethod
    def from_day(cls, day: CalendarDay) -> "CalendarDayResponse":
        return cls(day=day.day, tasks=[TaskResponse.from_result(t) for t in day.tasks])
