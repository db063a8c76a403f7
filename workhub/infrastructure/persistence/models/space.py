"""Space and project ORM models with their membership tables."""

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workhub.infrastructure.persistence.database import Base
from workhub.infrastructure.persistence.models.mixins import BaseModelMixin


class Space(BaseModelMixin, Base):
    """Top-level workspace grouping projects."""

    __tablename__ = "space"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)


class Project(BaseModelMixin, Base):
    """Project inside a space; tasks belong to a project."""

    __tablename__ = "project"

    space_id: Mapped[str] = mapped_column(
        String, ForeignKey("space.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)


class SpaceMember(BaseModelMixin, Base):
    """Membership of a user in a space (role OWNER or MEMBER)."""

    __tablename__ = "space_member"

    space_id: Mapped[str] = mapped_column(
        String, ForeignKey("space.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="MEMBER")

    __table_args__ = (
        UniqueConstraint("space_id", "user_id", name="uq_space_member"),
    )


class ProjectMember(BaseModelMixin, Base):
    """Membership of a user in a project (role OWNER or MEMBER)."""

    __tablename__ = "project_member"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="MEMBER")

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
        Index("ix_project_member_project_role", "project_id", "role"),
    )
