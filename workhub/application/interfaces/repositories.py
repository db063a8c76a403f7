"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain value objects only; no
infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from workhub.application.dtos.notification import (
        NotificationCreate,
        NotificationResult,
    )
    from workhub.application.dtos.task import (
        TaskListQuery,
        TaskResult,
        TaskStats,
        TaskToPersist,
    )
    from workhub.domain.value_objects import Principal


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for the task store (DIP)."""

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by ID or None."""

    async def create(self, data: TaskToPersist) -> TaskResult:
        """Insert a task and return it."""

    async def update(self, task_id: str, values: dict[str, Any]) -> TaskResult | None:
        """Apply values unconditionally. Returns None if the task does not exist."""

    async def update_if_status(
        self,
        task_id: str,
        expected_statuses: Collection[str],
        values: dict[str, Any],
    ) -> TaskResult | None:
        """Apply values only while the stored status is one of expected_statuses.

        Single conditional UPDATE; returns None when no row matched (missing
        task or status changed concurrently).
        """

    async def delete(self, task_id: str) -> bool:
        """Delete task. Returns False if it did not exist."""

    async def list_for_user(
        self, user_id: str, query: TaskListQuery
    ) -> tuple[list[TaskResult], int]:
        """Tasks the user owns or is assigned to (newest first) and the total count."""

    async def list_pending_approval(
        self,
        project_ids: Collection[str] | None,
        offset: int,
        limit: int,
    ) -> tuple[list[TaskResult], int]:
        """Tasks in PENDING_APPROVAL, limited to project_ids unless None (all projects)."""

    async def count_stats(
        self,
        user_id: str,
        owned_project_ids: Collection[str],
        member_project_ids: Collection[str],
        now: datetime,
    ) -> TaskStats:
        """Count tasks per status for a user.

        Scope: every task of owned projects, plus tasks assigned to the user in
        member projects. Overdue means due_date < now and status PENDING or
        PROCESSING.
        """

    async def list_with_due_date(
        self, project_id: str, assignee_id: str | None = None
    ) -> list[TaskResult]:
        """Tasks of a project that have a due date, ascending; optionally only one assignee's."""


# Notification repository interface
class INotificationRepository(Protocol):
    """Protocol for the notification store (DIP)."""

    async def create(self, data: NotificationCreate) -> NotificationResult:
        """Insert a notification and return it."""

    async def get_by_id(self, notification_id: str) -> NotificationResult | None:
        """Return notification by ID or None."""

    async def list_for_recipient(
        self,
        recipient_id: str,
        offset: int,
        limit: int,
        notification_type: str | None = None,
    ) -> tuple[list[NotificationResult], int]:
        """Recipient's notifications, newest first, and the total count."""

    async def list_unread(self, recipient_id: str) -> list[NotificationResult]:
        """All unread notifications for recipient, newest first."""

    async def list_recent_unread(
        self, recipient_id: str, since: datetime, limit: int
    ) -> list[NotificationResult]:
        """Unread notifications created at or after since, newest first, at most limit."""

    async def mark_read(
        self, notification_id: str, read_at: datetime
    ) -> NotificationResult | None:
        """Set is_read/read_at. Returns None if the notification does not exist."""

    async def mark_all_read(self, recipient_id: str, read_at: datetime) -> int:
        """Mark every unread notification of recipient as read. Returns count updated."""


# Membership resolver interface
class IMembershipResolver(Protocol):
    """Resolves principals to space/project roles (OWNER or MEMBER)."""

    async def space_role(self, principal_id: str, space_id: str) -> str | None:
        """Return the principal's role in the space, or None if not a member."""

    async def project_role(self, principal_id: str, project_id: str) -> str | None:
        """Return the principal's role in the project, or None if not a member."""

    async def space_member_ids(self, space_id: str) -> list[str]:
        """Return IDs of all members of the space."""

    async def project_member_ids(self, project_id: str) -> list[str]:
        """Return IDs of all members of the project."""

    async def project_owner_ids(self, project_id: str) -> list[str]:
        """Return IDs of members holding OWNER in the project."""

    async def project_ids_for(
        self,
        principal_id: str,
        role: str | None = None,
        space_id: str | None = None,
    ) -> list[str]:
        """Return IDs of projects where principal is a member (optionally with role / in space)."""


# Principal directory interface
class IPrincipalDirectory(Protocol):
    """Looks up principals (users) by ID or system role."""

    async def get_principal(self, principal_id: str) -> Principal | None:
        """Return the resolved principal, or None if unknown or inactive."""

    async def display_name(self, principal_id: str) -> str | None:
        """Return the principal's display name, or None if unknown."""

    async def ids_with_system_roles(self, roles: Collection[str]) -> list[str]:
        """Return IDs of active principals holding any of the given system roles."""
