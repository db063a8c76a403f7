"""Persistence repositories. Re-exports for dependency injection."""

from workhub.infrastructure.persistence.repositories.base import BaseRepository
from workhub.infrastructure.persistence.repositories.membership_repo import (
    SqlMembershipResolver,
)
from workhub.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from workhub.infrastructure.persistence.repositories.task_repo import TaskRepository
from workhub.infrastructure.persistence.repositories.user_repo import SqlPrincipalDirectory

__all__ = [
    "BaseRepository",
    "NotificationRepository",
    "SqlMembershipResolver",
    "SqlPrincipalDirectory",
    "TaskRepository",
]
