"""Task use cases: workflow mutations and read-side queries."""

from workhub.application.use_cases.tasks.task_queries import TaskQueryService
from workhub.application.use_cases.tasks.task_workflow import TaskWorkflowService

__all__ = ["TaskQueryService", "TaskWorkflowService"]
