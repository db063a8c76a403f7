"""Task and notification service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.application.use_cases.notifications import (
    NotificationQueryService,
    NotificationService,
)
from workhub.application.use_cases.tasks import TaskQueryService, TaskWorkflowService
from workhub.core.config import get_settings
from workhub.infrastructure.external.storage import StorageFactory
from workhub.infrastructure.persistence.database import get_db, get_db_transactional
from workhub.infrastructure.persistence.repositories import (
    NotificationRepository,
    SqlMembershipResolver,
    SqlPrincipalDirectory,
    TaskRepository,
)
from workhub.infrastructure.services import AttachmentStorageService, DeliveryOutbox

from .delivery import get_delivery_outbox


def build_notification_service(
    db: AsyncSession, outbox: DeliveryOutbox | None
) -> NotificationService:
    """NotificationService on the request session, queueing into outbox."""
    return NotificationService(
        NotificationRepository(db),
        SqlMembershipResolver(db),
        SqlPrincipalDirectory(db),
        delivery=outbox,
        approver_roles=get_settings().approver_roles,
    )


def get_attachment_storage() -> AttachmentStorageService:
    settings = get_settings()
    return AttachmentStorageService.from_settings(
        StorageFactory.create_storage_service(settings), settings
    )


async def get_task_workflow_service(
    outbox: Annotated[DeliveryOutbox, Depends(get_delivery_outbox)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    storage: Annotated[AttachmentStorageService, Depends(get_attachment_storage)],
) -> TaskWorkflowService:
    """Write-path task service; its notifications are delivered after commit."""
    settings = get_settings()
    return TaskWorkflowService(
        TaskRepository(db),
        SqlMembershipResolver(db),
        build_notification_service(db, outbox),
        attachment_storage=storage,
        approver_roles=settings.approver_roles,
        allow_reopen_completed=settings.allow_reopen_completed,
    )


async def get_task_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskQueryService:
    return TaskQueryService(
        TaskRepository(db),
        SqlMembershipResolver(db),
        approver_roles=get_settings().approver_roles,
    )


async def get_notification_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotificationQueryService:
    return NotificationQueryService(NotificationRepository(db))


async def get_notification_write_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> NotificationQueryService:
    """Same service on a transactional session (mark read / mark all read)."""
    return NotificationQueryService(NotificationRepository(db))
