"""Read-side task operations: single task, listings, approvals queue, stats and calendar."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING

from workhub.application.dtos.task import CalendarDay, TaskListQuery, TaskResult, TaskStats
from workhub.domain.enums import MemberRole, MembershipScope
from workhub.domain.exceptions import (
    AuthorizationException,
    MembershipNotFoundException,
    ResourceNotFoundException,
)
from workhub.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from workhub.application.interfaces.repositories import (
        IMembershipResolver,
        ITaskRepository,
    )
    from workhub.domain.value_objects import Principal


class TaskQueryService:
    """Task reads scoped to what the actor is allowed to see."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        membership: IMembershipResolver,
        approver_roles: frozenset[str] = frozenset(),
    ) -> None:
        self.task_repo = task_repo
        self.membership = membership
        self.approver_roles = approver_roles

    async def get_task(self, task_id: str, actor: Principal) -> TaskResult:
        """Return the task if actor is its owner/assignee or a member of its space or project."""
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        if actor.id in (task.owner_id, task.assignee_id):
            return task
        if await self.membership.project_role(actor.id, task.project_id) is not None:
            return task
        if await self.membership.space_role(actor.id, task.space_id) is not None:
            return task
        raise AuthorizationException(resource="task", action="read")

    async def list_tasks(
        self, actor: Principal, query: TaskListQuery
    ) -> tuple[list[TaskResult], int]:
        """Tasks the actor owns or is assigned to, newest first."""
        return await self.task_repo.list_for_user(actor.id, query)

    async def list_pending_approval(
        self, actor: Principal, page: int = 1, limit: int = 10
    ) -> tuple[list[TaskResult], int]:
        """Approval queue: every project for system approvers, owned projects otherwise."""
        offset = (page - 1) * limit
        if actor.has_system_role(self.approver_roles):
            return await self.task_repo.list_pending_approval(None, offset, limit)
        owned = await self.membership.project_ids_for(actor.id, role=MemberRole.OWNER.value)
        if not owned:
            return [], 0
        return await self.task_repo.list_pending_approval(owned, offset, limit)

    async def get_stats(self, actor: Principal, space_id: str | None = None) -> TaskStats:
        """Counters over owned projects plus the actor's assignments in member projects."""
        owned = await self.membership.project_ids_for(
            actor.id, role=MemberRole.OWNER.value, space_id=space_id
        )
        member = await self.membership.project_ids_for(
            actor.id, role=MemberRole.MEMBER.value, space_id=space_id
        )
        return await self.task_repo.count_stats(actor.id, owned, member, utc_now())

    async def get_calendar(self, actor: Principal, project_id: str) -> list[CalendarDay]:
        """Tasks with a due date grouped by day, ascending.

        Project owners see every task; other members only their own assignments.
        """
        role = await self.membership.project_role(actor.id, project_id)
        if role is None:
            raise MembershipNotFoundException(
                MembershipScope.PROJECT.value, project_id, actor.id
            )
        assignee_id = None if role == MemberRole.OWNER.value else actor.id
        tasks = await self.task_repo.list_with_due_date(project_id, assignee_id)
        by_day: dict[date, list[TaskResult]] = defaultdict(list)
        for task in tasks:
            if task.due_date is not None:
                by_day[task.due_date.date()].append(task)
        return [CalendarDay(day=d, tasks=tuple(by_day[d])) for d in sorted(by_day)]
