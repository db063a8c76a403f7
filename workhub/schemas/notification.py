"""Notification API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workhub.schemas.common import PageMeta


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipient_id: str
    actor_id: str | None = None
    actor_name: str | None = None
    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    meta: PageMeta


class MarkAllReadResponse(BaseModel):
    updated: int = Field(..., ge=0, description="Notifications switched to read")
