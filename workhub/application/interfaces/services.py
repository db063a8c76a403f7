"""Service interfaces (ports) for the application layer.

Protocols define contracts for delivery, backlog and attachment storage (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from workhub.application.dtos.notification import NotificationResult
    from workhub.application.dtos.task import AttachmentUpload
    from workhub.domain.value_objects import Attachment


# Real-time transport
class IDeliveryChannel(Protocol):
    """Pushes an event to every live connection of a principal."""

    async def send(self, principal_id: str, event: dict[str, Any]) -> int:
        """Send event; return number of connections reached (0 when offline)."""


class IDeliveryQueue(Protocol):
    """Collects deliveries produced during a unit of work.

    Nothing is sent until the unit of work commits; a rollback drops them.
    """

    def enqueue(self, notification: NotificationResult) -> None:
        """Queue a persisted notification for best-effort delivery."""


class IBacklogProvider(Protocol):
    """Fetches the notifications to replay when a principal connects."""

    async def fetch_backlog(self, principal_id: str) -> list[NotificationResult]:
        """Return recent unread notifications for principal, newest first."""


# Attachment storage
class IAttachmentStorage(Protocol):
    """Validates and stores uploaded task attachments."""

    def validate(self, uploads: list[AttachmentUpload]) -> None:
        """Raise ValidationException if count, size or type is not allowed."""

    async def store(self, upload: AttachmentUpload) -> Attachment:
        """Store one file and return its attachment record."""

    async def discard(self, attachments: list[Attachment]) -> None:
        """Remove stored files that will not be referenced by any task."""
