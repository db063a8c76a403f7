"""Domain layer: enums, value objects and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from workhub.domain.enums import (
    MemberRole,
    NotificationType,
    SystemRole,
    TaskPriority,
    TaskStatus,
)
from workhub.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    FieldPermissionException,
    InvalidStateException,
    MembershipNotFoundException,
    ResourceNotFoundException,
    ValidationException,
    WorkhubException,
)
from workhub.domain.value_objects import Attachment, Principal

__all__ = [
    # Enums
    "MemberRole",
    "NotificationType",
    "SystemRole",
    "TaskPriority",
    "TaskStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "FieldPermissionException",
    "InvalidStateException",
    "MembershipNotFoundException",
    "ResourceNotFoundException",
    "ValidationException",
    "WorkhubException",
    # Value objects
    "Attachment",
    "Principal",
]
