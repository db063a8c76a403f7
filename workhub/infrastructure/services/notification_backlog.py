"""Backlog provider for WebSocket connects. Implements IBacklogProvider.

Runs outside any request, so it opens its own short-lived session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from workhub.application.use_cases.notifications import NotificationQueryService
from workhub.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from workhub.application.dtos.notification import NotificationResult


class SessionBacklogProvider:
    """Unread notifications from the last window_hours, newest first, at most limit."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        window_hours: int = 24,
        limit: int = 10,
    ) -> None:
        self.session_factory = session_factory
        self.window_hours = window_hours
        self.limit = limit

    async def fetch_backlog(self, principal_id: str) -> list[NotificationResult]:
        async with self.session_factory() as session:
            queries = NotificationQueryService(NotificationRepository(session))
            return await queries.fetch_backlog(principal_id, self.window_hours, self.limit)
