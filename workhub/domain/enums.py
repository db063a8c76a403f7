"""Domain enumerations for WorkHub.

Enums represent fixed sets of domain values (task status, membership roles,
notification types). Values are stored as plain strings.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status.

    PENDING -> PROCESSING -> PENDING_APPROVAL -> COMPLETED, with
    PENDING_APPROVAL -> PROCESSING on rejection.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    COMPLETED = "COMPLETED"


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MemberRole(_ValuesMixin, str, Enum):
    """Role of a principal inside a space or a project."""

    OWNER = "OWNER"
    MEMBER = "MEMBER"


class SystemRole(_ValuesMixin, str, Enum):
    """System-wide role carried on the user record."""

    PROJECT_MANAGER = "PROJECT_MANAGER"
    MEMBER = "MEMBER"


class MembershipScope(_ValuesMixin, str, Enum):
    """Container a membership belongs to."""

    SPACE = "space"
    PROJECT = "project"


class AccessTier(_ValuesMixin, str, Enum):
    """Highest tier an actor reaches on a task (see task permission engine)."""

    ELEVATED = "elevated"
    OWNER = "owner"
    ASSIGNEE = "assignee"


class NotificationType(_ValuesMixin, str, Enum):
    """Closed set of domain events that produce notifications."""

    CREATE_SPACE = "CREATE_SPACE"
    UPDATE_SPACE = "UPDATE_SPACE"
    DELETE_SPACE = "DELETE_SPACE"
    YOU_WERE_ADDED_TO_SPACE = "YOU_WERE_ADDED_TO_SPACE"
    ADD_MEMBER_TO_SPACE = "ADD_MEMBER_TO_SPACE"
    YOU_WERE_REMOVED_FROM_SPACE = "YOU_WERE_REMOVED_FROM_SPACE"
    REMOVE_MEMBER_FROM_SPACE = "REMOVE_MEMBER_FROM_SPACE"
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    YOU_WERE_ADDED_TO_PROJECT = "YOU_WERE_ADDED_TO_PROJECT"
    ADD_MEMBER_TO_PROJECT = "ADD_MEMBER_TO_PROJECT"
    YOU_WERE_REMOVED_FROM_PROJECT = "YOU_WERE_REMOVED_FROM_PROJECT"
    REMOVE_MEMBER_FROM_PROJECT = "REMOVE_MEMBER_FROM_PROJECT"
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"
    YOU_WERE_ASSIGNED_TASK = "YOU_WERE_ASSIGNED_TASK"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
    TASK_PENDING_APPROVAL = "TASK_PENDING_APPROVAL"
    TASK_APPROVED = "TASK_APPROVED"
    TASK_REJECTED = "TASK_REJECTED"
