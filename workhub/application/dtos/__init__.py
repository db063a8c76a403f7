"""Application DTOs (no ORM dependency)."""

from workhub.application.dtos.notification import NotificationCreate, NotificationResult
from workhub.application.dtos.task import (
    AttachmentUpload,
    CalendarDay,
    CreateTaskCommand,
    TaskListQuery,
    TaskResult,
    TaskStats,
    TaskToPersist,
    TaskUpdateOutcome,
)

__all__ = [
    "AttachmentUpload",
    "CalendarDay",
    "CreateTaskCommand",
    "NotificationCreate",
    "NotificationResult",
    "TaskListQuery",
    "TaskResult",
    "TaskStats",
    "TaskToPersist",
    "TaskUpdateOutcome",
]
