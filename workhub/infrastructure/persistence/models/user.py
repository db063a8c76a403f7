"""User ORM model (principal directory)."""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from workhub.infrastructure.persistence.database import Base
from workhub.infrastructure.persistence.models.mixins import BaseModelMixin


class User(BaseModelMixin, Base):
    """User model. Table: app_user. system_role drives system-wide approval rights."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    system_role: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default="MEMBER", default="MEMBER", index=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true"), default=True
    )
