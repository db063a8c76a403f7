"""Application use cases: one entry point per workflow."""

from workhub.application.use_cases.notifications import (
    NotificationQueryService,
    NotificationService,
)
from workhub.application.use_cases.tasks import TaskQueryService, TaskWorkflowService

__all__ = [
    "NotificationQueryService",
    "NotificationService",
    "TaskQueryService",
    "TaskWorkflowService",
]
