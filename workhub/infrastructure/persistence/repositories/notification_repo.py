"""Notification repository. Implements INotificationRepository."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.application.dtos.notification import NotificationCreate, NotificationResult
from workhub.infrastructure.persistence.models.notification import Notification
from workhub.infrastructure.persistence.repositories.base import BaseRepository
from workhub.shared.utils.datetime import ensure_utc

# Payload keys that identify the event a notification was created for.
_DUPLICATE_DATA_KEYS = ("task_id", "project_id", "space_id")


def _to_result(n: Notification) -> NotificationResult:
    """Map Notification ORM to NotificationResult DTO."""
    return NotificationResult(
        id=n.id,
        recipient_id=n.recipient_id,
        actor_id=n.actor_id,
        actor_name=n.actor_name,
        type=n.type,
        data=dict(n.data or {}),
        is_read=n.is_read,
        read_at=ensure_utc(n.read_at),
        created_at=ensure_utc(n.created_at),
    )


def _duplicate_key(n: Notification) -> tuple[str | None, ...]:
    data = n.data or {}
    return (
        n.recipient_id,
        n.type,
        *(data.get(k) for k in _DUPLICATE_DATA_KEYS),
        n.actor_id,
    )


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository. Rows are never edited apart from read state."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)

    async def create(self, data: NotificationCreate) -> NotificationResult:
        notification = Notification(
            recipient_id=data.recipient_id,
            type=data.type,
            data=dict(data.data),
            actor_id=data.actor_id,
            actor_name=data.actor_name,
            is_read=False,
        )
        return _to_result(await self.add(notification))

    async def get_by_id(self, notification_id: str) -> NotificationResult | None:
        notification = await self.get_model(notification_id)
        return _to_result(notification) if notification else None

    async def list_for_recipient(
        self,
        recipient_id: str,
        offset: int,
        limit: int,
        notification_type: str | None = None,
    ) -> tuple[list[NotificationResult], int]:
        stmt = select(Notification).where(Notification.recipient_id == recipient_id)
        if notification_type:
            stmt = stmt.where(Notification.type == notification_type)
        total = await self.count(stmt)
        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [_to_result(n) for n in result.scalars().all()], total

    async def list_unread(self, recipient_id: str) -> list[NotificationResult]:
        result = await self.db.execute(
            select(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.is_read.is_(False),
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return [_to_result(n) for n in result.scalars().all()]

    async def list_recent_unread(
        self, recipient_id: str, since: datetime, limit: int
    ) -> list[NotificationResult]:
        result = await self.db.execute(
            select(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.is_read.is_(False),
                Notification.created_at >= since,
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return [_to_result(n) for n in result.scalars().all()]

    async def mark_read(
        self, notification_id: str, read_at: datetime
    ) -> NotificationResult | None:
        notification = await self.get_model(notification_id)
        if notification is None:
            return None
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = read_at
            await self.db.flush()
            await self.db.refresh(notification)
        return _to_result(notification)

    async def mark_all_read(self, recipient_id: str, read_at: datetime) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    async def find_duplicates(self, window_seconds: float) -> list[str]:
        """IDs of notifications repeating an earlier one within window_seconds.

        Two rows are duplicates when recipient, type, actor and the task,
        project and space ids in data all match. The oldest row of each burst
        is kept.
        """
        result = await self.db.execute(
            select(Notification).order_by(Notification.created_at, Notification.id)
        )
        window = timedelta(seconds=window_seconds)
        kept_at: dict[tuple[str | None, ...], datetime] = {}
        duplicates: list[str] = []
        for n in result.scalars().all():
            key = _duplicate_key(n)
            created = ensure_utc(n.created_at)
            assert created is not None
            first = kept_at.get(key)
            if first is not None and created - first <= window:
                duplicates.append(n.id)
                continue
            kept_at[key] = created
        return duplicates

    async def delete_many(self, notification_ids: list[str]) -> int:
        if not notification_ids:
            return 0
        result = await self.db.execute(
            delete(Notification).where(Notification.id.in_(notification_ids))
        )
        return int(result.rowcount or 0)
