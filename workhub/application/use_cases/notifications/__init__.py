"""Notification use cases: fan-out engine and read-side queries."""

from workhub.application.use_cases.notifications.notification_queries import (
    NotificationQueryService,
)
from workhub.application.use_cases.notifications.notification_service import (
    NotificationService,
    task_event_data,
)

__all__ = ["NotificationQueryService", "NotificationService", "task_event_data"]
