"""Infrastructure services: attachment storage, delivery outbox, backlog provider."""

from workhub.infrastructure.services.attachment_storage import AttachmentStorageService
from workhub.infrastructure.services.delivery_outbox import (
    DeliveryDispatcher,
    DeliveryOutbox,
    notification_event,
)
from workhub.infrastructure.services.notification_backlog import SessionBacklogProvider

__all__ = [
    "AttachmentStorageService",
    "DeliveryDispatcher",
    "DeliveryOutbox",
    "SessionBacklogProvider",
    "notification_event",
]
