"""DTOs for notifications (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class NotificationCreate:
    """Notification row to persist. actor_name is already resolved."""

    recipient_id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)
    actor_id: str | None = None
    actor_name: str | None = None


@dataclass(frozen=True)
class NotificationResult:
    """Persisted notification."""

    id: str
    recipient_id: str
    actor_id: str | None
    actor_name: str | None
    type: str
    data: dict[str, Any]
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON transport (WebSocket push, Redis pub/sub)."""
        return {
            "id": self.id,
            "recipient_id": self.recipient_id,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "type": self.type,
            "data": self.data,
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat(),
        }
