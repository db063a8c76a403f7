"""Task repository. Implements ITaskRepository."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, delete, false, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.application.dtos.task import (
    TaskListQuery,
    TaskResult,
    TaskStats,
    TaskToPersist,
)
from workhub.domain.enums import TaskStatus
from workhub.domain.value_objects import Attachment
from workhub.infrastructure.persistence.models.task import Task
from workhub.infrastructure.persistence.repositories.base import BaseRepository
from workhub.shared.utils.datetime import ensure_utc, utc_now


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        space_id=t.space_id,
        project_id=t.project_id,
        owner_id=t.owner_id,
        assignee_id=t.assignee_id,
        name=t.name,
        description=t.description,
        status=t.status,
        priority=t.priority,
        start_date=ensure_utc(t.start_date),
        due_date=ensure_utc(t.due_date),
        completed_at=ensure_utc(t.completed_at),
        approved_by=t.approved_by,
        approved_at=ensure_utc(t.approved_at),
        rejected_by=t.rejected_by,
        rejected_at=ensure_utc(t.rejected_at),
        review_comment=t.review_comment,
        attachments=tuple(Attachment.from_dict(a) for a in (t.attachments or [])),
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        task = await self.get_model(task_id)
        return _to_result(task) if task else None

    async def create(self, data: TaskToPersist) -> TaskResult:
        """Create a task and return the result DTO."""
        task = Task(
            space_id=data.space_id,
            project_id=data.project_id,
            owner_id=data.owner_id,
            assignee_id=data.assignee_id,
            name=data.name,
            description=data.description,
            status=data.status,
            priority=data.priority,
            start_date=data.start_date,
            due_date=data.due_date,
            attachments=[],
        )
        return _to_result(await self.add(task))

    async def update(self, task_id: str, values: dict[str, Any]) -> TaskResult | None:
        task = await self.get_model(task_id)
        if task is None:
            return None
        for key, value in values.items():
            setattr(task, key, value)
        await self.db.flush()
        await self.db.refresh(task)
        return _to_result(task)

    async def update_if_status(
        self,
        task_id: str,
        expected_statuses: Collection[str],
        values: dict[str, Any],
    ) -> TaskResult | None:
        """Conditional UPDATE guarded by the current status; None when nothing matched."""
        stmt = (
            update(Task)
            .where(Task.id == task_id, Task.status.in_(list(expected_statuses)))
            .values(**values, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        refreshed = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return _to_result(refreshed.scalar_one())

    async def delete(self, task_id: str) -> bool:
        result = await self.db.execute(delete(Task).where(Task.id == task_id))
        return result.rowcount > 0

    async def list_for_user(
        self, user_id: str, query: TaskListQuery
    ) -> tuple[list[TaskResult], int]:
        stmt = select(Task).where(
            or_(Task.owner_id == user_id, Task.assignee_id == user_id)
        )
        if query.project_id:
            stmt = stmt.where(Task.project_id == query.project_id)
        if query.status:
            stmt = stmt.where(Task.status == query.status)
        total = await self.count(stmt)
        result = await self.db.execute(
            stmt.order_by(Task.created_at.desc(), Task.id)
            .offset(query.offset)
            .limit(query.limit)
        )
        return [_to_result(t) for t in result.scalars().all()], total

    async def list_pending_approval(
        self,
        project_ids: Collection[str] | None,
        offset: int,
        limit: int,
    ) -> tuple[list[TaskResult], int]:
        stmt = select(Task).where(Task.status == TaskStatus.PENDING_APPROVAL.value)
        if project_ids is not None:
            if not project_ids:
                return [], 0
            stmt = stmt.where(Task.project_id.in_(list(project_ids)))
        total = await self.count(stmt)
        result = await self.db.execute(
            stmt.order_by(Task.updated_at.desc(), Task.id).offset(offset).limit(limit)
        )
        return [_to_result(t) for t in result.scalars().all()], total

    async def count_stats(
        self,
        user_id: str,
        owned_project_ids: Collection[str],
        member_project_ids: Collection[str],
        now: datetime,
    ) -> TaskStats:
        scope = []
        if owned_project_ids:
            scope.append(Task.project_id.in_(list(owned_project_ids)))
        if member_project_ids:
            scope.append(
                and_(
                    Task.project_id.in_(list(member_project_ids)),
                    Task.assignee_id == user_id,
                )
            )
        if not scope:
            return TaskStats()

        def _count_status(status: TaskStatus) -> Any:
            return func.count(case((Task.status == status.value, 1)))

        overdue = func.count(
            case(
                (
                    and_(
                        Task.due_date.is_not(None),
                        Task.due_date < now,
                        Task.status.in_(
                            [TaskStatus.PENDING.value, TaskStatus.PROCESSING.value]
                        ),
                    ),
                    1,
                )
            )
        )
        stmt = select(
            _count_status(TaskStatus.PENDING),
            _count_status(TaskStatus.PROCESSING),
            _count_status(TaskStatus.PENDING_APPROVAL),
            _count_status(TaskStatus.COMPLETED),
            overdue,
        ).where(or_(false(), *scope))
        row = (await self.db.execute(stmt)).one()
        return TaskStats(
            pending=int(row[0]),
            processing=int(row[1]),
            pending_approval=int(row[2]),
            completed=int(row[3]),
            overdue=int(row[4]),
        )

    async def list_with_due_date(
        self, project_id: str, assignee_id: str | None = None
    ) -> list[TaskResult]:
        stmt = select(Task).where(
            Task.project_id == project_id, Task.due_date.is_not(None)
        )
        if assignee_id is not None:
            stmt = stmt.where(Task.assignee_id == assignee_id)
        result = await self.db.execute(stmt.order_by(Task.due_date, Task.id))
        return [_to_result(t) for t in result.scalars().all()]
