"""Tests for domain exceptions (error_code, message, details)."""

from workhub.core.exception_handlers import status_for
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
from workhub.infrastructure.exceptions import StoragePermissionError, StorageUploadError


def test_workhub_exception_default_error_code() -> None:
    """Base WorkhubException uses class name as error_code when not provided."""
    exc = WorkhubException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "WorkhubException"
    assert exc.details == {}
    assert exc.to_dict() == {
        "error": "WorkhubException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="reason")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "reason"}
    assert ValidationException("Invalid").details == {}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_builds_message_from_resource_and_action() -> None:
    exc = AuthorizationException(resource="task", action="approve")
    assert exc.message == "Permission denied: approve on task"
    assert exc.details == {"resource": "task", "action": "approve"}


def test_field_permission_exception_lists_fields() -> None:
    exc = FieldPermissionException("nope", ["status", "name"])
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {"fields": ["status", "name"]}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("task", "t-1")
    assert exc.message == "Task not found: t-1"
    assert exc.details == {"resource_type": "task", "resource_id": "t-1"}


def test_membership_not_found_exception() -> None:
    exc = MembershipNotFoundException("project", "p-1", "u-1")
    assert exc.error_code == "MEMBERSHIP_NOT_FOUND"
    assert exc.details == {"scope": "project", "scope_id": "p-1", "principal_id": "u-1"}


def test_invalid_state_exception_details_are_optional() -> None:
    assert InvalidStateException("bad").details == {}
    exc = InvalidStateException("bad", current_status="COMPLETED")
    assert exc.details == {"current_status": "COMPLETED"}


def test_http_status_mapping() -> None:
    assert status_for(ResourceNotFoundException("task", "x")) == 404
    assert status_for(MembershipNotFoundException("space", "s", "u")) == 404
    assert status_for(AuthenticationException()) == 401
    assert status_for(AuthorizationException()) == 403
    assert status_for(FieldPermissionException("no", ["status"])) == 403
    assert status_for(InvalidStateException("bad")) == 409
    assert status_for(ValidationException("bad")) == 400
    assert status_for(WorkhubException("other")) == 400


def test_storage_errors_map_to_client_and_gateway_statuses() -> None:
    assert status_for(StoragePermissionError("../etc/passwd", "path_validation")) == 400
    assert status_for(StorageUploadError("a.pdf", "disk full")) == 502
