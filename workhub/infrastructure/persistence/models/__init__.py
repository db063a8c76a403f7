"""ORM models. Import here so Base.metadata sees every table (Alembic, tests)."""

from workhub.infrastructure.persistence.models.notification import Notification
from workhub.infrastructure.persistence.models.space import (
    Project,
    ProjectMember,
    Space,
    SpaceMember,
)
from workhub.infrastructure.persistence.models.task import Task
from workhub.infrastructure.persistence.models.user import User

__all__ = [
    "Notification",
    "Project",
    "ProjectMember",
    "Space",
    "SpaceMember",
    "Task",
    "User",
]
