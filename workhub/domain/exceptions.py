"""Domain exceptions for WorkHub.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class WorkhubException(Exception):
    """Base exception for all WorkHub application errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(WorkhubException):
    """Raised when input validation fails (e.g. empty rejection reason)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(WorkhubException):
    """Raised when authentication fails (e.g. invalid or expired token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(WorkhubException):
    """Raised when the actor lacks the role required for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'task', 'notification').
            action: Optional action that was attempted (e.g. 'approve').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class FieldPermissionException(WorkhubException):
    """Raised when an update payload carries fields the actor may not write.

    details["fields"] lists every rejected field in payload order.
    """

    def __init__(self, message: str, fields: list[str]) -> None:
        super().__init__(message, "PERMISSION_DENIED", {"fields": list(fields)})


class ResourceNotFoundException(WorkhubException):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type.capitalize()} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class MembershipNotFoundException(WorkhubException):
    """Raised when a principal is not a member of the required space or project."""

    def __init__(self, scope: str, scope_id: str, principal_id: str) -> None:
        """Initialize with the scope that is missing the membership.

        Args:
            scope: 'space' or 'project'.
            scope_id: ID of the space or project.
            principal_id: Principal that is not a member.
        """
        super().__init__(
            f"User {principal_id} is not a member of {scope} {scope_id}",
            "MEMBERSHIP_NOT_FOUND",
            {"scope": scope, "scope_id": scope_id, "principal_id": principal_id},
        )


class InvalidStateException(WorkhubException):
    """Raised when a status precondition is not met (e.g. approve on a task not pending approval)."""

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        requested_status: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if current_status is not None:
            details["current_status"] = current_status
        if requested_status is not None:
            details["requested_status"] = requested_status
        super().__init__(message, "INVALID_STATE", details)
