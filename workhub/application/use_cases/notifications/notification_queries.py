"""Read-side notification operations: listing, read state and backlog."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from workhub.domain.exceptions import AuthorizationException, ResourceNotFoundException
from workhub.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from workhub.application.dtos.notification import NotificationResult
    from workhub.application.interfaces.repositories import INotificationRepository


class NotificationQueryService:
    """Lists notifications for their recipient and mutates read state."""

    def __init__(self, notification_repo: INotificationRepository) -> None:
        self.notification_repo = notification_repo

    async def list_notifications(
        self,
        recipient_id: str,
        page: int = 1,
        limit: int = 10,
        notification_type: str | None = None,
    ) -> tuple[list[NotificationResult], int]:
        """Page through the recipient's notifications, newest first."""
        return await self.notification_repo.list_for_recipient(
            recipient_id,
            offset=(page - 1) * limit,
            limit=limit,
            notification_type=notification_type,
        )

    async def list_unread(self, recipient_id: str) -> list[NotificationResult]:
        return await self.notification_repo.list_unread(recipient_id)

    async def mark_read(self, notification_id: str, recipient_id: str) -> NotificationResult:
        """Mark one notification read. Only its recipient may do so.

        Already-read notifications are returned unchanged (read_at kept).
        """
        notification = await self.notification_repo.get_by_id(notification_id)
        if notification is None:
            raise ResourceNotFoundException("notification", notification_id)
        if notification.recipient_id != recipient_id:
            raise AuthorizationException(
                resource="notification",
                action="mark_read",
                message="You can only mark your own notifications as read",
            )
        if notification.is_read:
            return notification
        updated = await self.notification_repo.mark_read(notification_id, utc_now())
        if updated is None:
            raise ResourceNotFoundException("notification", notification_id)
        return updated

    async def mark_all_read(self, recipient_id: str) -> int:
        """Mark every unread notification of recipient as read; returns how many changed."""
        return await self.notification_repo.mark_all_read(recipient_id, utc_now())

    async def fetch_backlog(
        self, recipient_id: str, window_hours: int, limit: int
    ) -> list[NotificationResult]:
        """Unread notifications from the last window_hours, newest first, at most limit."""
        if limit <= 0:
            return []
        since = utc_now() - timedelta(hours=window_hours)
        return await self.notification_repo.list_recent_unread(recipient_id, since, limit)
