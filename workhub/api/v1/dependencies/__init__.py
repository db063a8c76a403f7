"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, never on repositories directly.
"""

from .auth import (
    CurrentPrincipal,
    get_current_principal,
    get_principal_directory,
    resolve_principal,
)
from .delivery import get_delivery_outbox
from .tasks import (
    build_notification_service,
    get_attachment_storage,
    get_notification_query_service,
    get_notification_write_service,
    get_task_query_service,
    get_task_workflow_service,
)

__all__ = [
    "CurrentPrincipal",
    "build_notification_service",
    "get_attachment_storage",
    "get_current_principal",
    "get_delivery_outbox",
    "get_notification_query_service",
    "get_notification_write_service",
    "get_principal_directory",
    "get_task_query_service",
    "get_task_workflow_service",
    "resolve_principal",
]
