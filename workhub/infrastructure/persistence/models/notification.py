"""Notification ORM model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from workhub.infrastructure.persistence.database import Base
from workhub.infrastructure.persistence.models.mixins import BaseModelMixin


class Notification(BaseModelMixin, Base):
    """Notification for one recipient. Content is immutable; only is_read/read_at change.

    actor_id has no foreign key: the row must survive the actor's removal,
    and actor_name keeps the name as it was when the event happened.
    """

    __tablename__ = "notification"

    recipient_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)
    actor_name: Mapped[str | None] = mapped_column(String, nullable=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_recipient_read_created", "recipient_id", "is_read", "created_at"),
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
    )
