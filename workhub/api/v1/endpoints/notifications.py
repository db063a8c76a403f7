"""Notification API: the caller's own notifications and their read state."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from workhub.api.v1.dependencies import (
    CurrentPrincipal,
    get_notification_query_service,
    get_notification_write_service,
)
from workhub.application.use_cases.notifications import NotificationQueryService
from workhub.core.config import get_settings
from workhub.core.limiter import limit_writes
from workhub.schemas.common import PageMeta
from workhub.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)

router = APIRouter()

ReadService = Annotated[NotificationQueryService, Depends(get_notification_query_service)]
WriteService = Annotated[NotificationQueryService, Depends(get_notification_write_service)]


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    actor: CurrentPrincipal,
    notifications: ReadService,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    notification_type: Annotated[str | None, Query(alias="type")] = None,
):
    """Caller's notifications, newest first. limit is capped at NOTIFICATION_PAGE_SIZE_MAX."""
    limit = min(limit, get_settings().notification_page_size_max)
    items, total = await notifications.list_notifications(
        actor.id, page=page, limit=limit, notification_type=notification_type
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        meta=PageMeta.build(page, limit, total),
    )


@router.get("/unread", response_model=list[NotificationResponse])
async def list_unread(actor: CurrentPrincipal, notifications: ReadService):
    return [NotificationResponse.model_validate(n) for n in await notifications.list_unread(actor.id)]


@router.patch("/read-all", response_model=MarkAllReadResponse)
@limit_writes
async def mark_all_read(request: Request, actor: CurrentPrincipal, notifications: WriteService):
    return MarkAllReadResponse(updated=await notifications.mark_all_read(actor.id))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
@limit_writes
async def mark_read(
    request: Request,
    notification_id: str,
    actor: CurrentPrincipal,
    notifications: WriteService,
):
    """Mark one of the caller's notifications as read."""
    notification = await notifications.mark_read(notification_id, actor.id)
    return NotificationResponse.model_validate(notification)
