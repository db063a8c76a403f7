"""Task API: thin routes delegating to TaskWorkflowService and TaskQueryService."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status

from workhub.api.v1.dependencies import (
    CurrentPrincipal,
    get_task_query_service,
    get_task_workflow_service,
)
from workhub.application.dtos.task import (
    AttachmentUpload,
    CreateTaskCommand,
    TaskListQuery,
    TaskUpdateOutcome,
)
from workhub.application.use_cases.tasks import TaskQueryService, TaskWorkflowService
from workhub.core.limiter import limit_upload, limit_writes
from workhub.domain.exceptions import ValidationException
from workhub.schemas.common import PageMeta
from workhub.schemas.task import (
    CalendarDayResponse,
    TaskApproveRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskRejectRequest,
    TaskResponse,
    TaskStatsResponse,
    TaskStatusRequest,
    TaskUpdateRequest,
    TaskUpdateResponse,
)

router = APIRouter()

WorkflowService = Annotated[TaskWorkflowService, Depends(get_task_workflow_service)]
QueryService = Annotated[TaskQueryService, Depends(get_task_query_service)]

_REWRITE_MESSAGE = "Task submitted for approval; an approver must complete it"


def _update_response(outcome: TaskUpdateOutcome, response: Response) -> TaskUpdateResponse:
    """202 when the requested COMPLETED was turned into a submission for approval."""
    if outcome.status_rewritten:
        response.status_code = status.HTTP_202_ACCEPTED
    return TaskUpdateResponse(
        task=TaskResponse.from_result(outcome.task),
        changed_fields=list(outcome.changed_fields),
        status_rewritten=outcome.status_rewritten,
        requested_status=outcome.requested_status,
        message=_REWRITE_MESSAGE if outcome.status_rewritten else None,
    )


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
):
    """Create a task in PENDING; notifies the assignee and the project members."""
    task = await workflow.create_task(
        CreateTaskCommand(
            space_id=body.space_id,
            project_id=body.project_id,
            name=body.name,
            description=body.description,
            assignee_id=body.assignee_id,
            priority=body.priority,
            start_date=body.start_date,
            due_date=body.due_date,
        ),
        actor,
    )
    return TaskResponse.from_result(task)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    actor: CurrentPrincipal,
    queries: QueryService,
    project_id: str | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Tasks the caller owns or is assigned to, newest first."""
    tasks, total = await queries.list_tasks(
        actor,
        TaskListQuery(project_id=project_id, status=status_filter, page=page, limit=limit),
    )
    return TaskListResponse(
        items=[TaskResponse.from_result(t) for t in tasks],
        meta=PageMeta.build(page, limit, total),
    )


@router.get("/pending-approval", response_model=TaskListResponse)
async def list_pending_approval(
    actor: CurrentPrincipal,
    queries: QueryService,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Approval queue: all projects for approvers, owned projects for project owners."""
    tasks, total = await queries.list_pending_approval(actor, page=page, limit=limit)
    return TaskListResponse(
        items=[TaskResponse.from_result(t) for t in tasks],
        meta=PageMeta.build(page, limit, total),
    )


@router.get("/stats", response_model=TaskStatsResponse)
async def task_stats(
    actor: CurrentPrincipal,
    queries: QueryService,
    space_id: str | None = None,
):
    return TaskStatsResponse.from_stats(await queries.get_stats(actor, space_id=space_id))


@router.get("/calendar", response_model=list[CalendarDayResponse])
async def task_calendar(
    actor: CurrentPrincipal,
    queries: QueryService,
    project_id: Annotated[str, Query(min_length=1)],
):
    """Tasks with a due date in the project, grouped by day."""
    days = await queries.get_calendar(actor, project_id)
    return [CalendarDayResponse.from_day(d) for d in days]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, actor: CurrentPrincipal, queries: QueryService):
    return TaskResponse.from_result(await queries.get_task(task_id, actor))


@router.patch(
    "/{task_id}",
    response_model=TaskUpdateResponse,
    responses={202: {"model": TaskUpdateResponse, "description": "Submitted for approval"}},
)
@limit_writes
async def update_task(
    request: Request,
    response: Response,
    task_id: str,
    body: TaskUpdateRequest,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
):
    """Partial update; allowed fields depend on the caller's role on the task."""
    outcome = await workflow.update_task(task_id, body.changes(), actor)
    return _update_response(outcome, response)


@router.post(
    "/{task_id}/attachments",
    response_model=TaskUpdateResponse,
)
@limit_upload
async def upload_attachments(
    request: Request,
    response: Response,
    task_id: str,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
    files: Annotated[list[UploadFile] | None, File()] = None,
    attachments: Annotated[str | None, Form(description="JSON list of attachments to keep")] = None,
):
    """Upload files. With `attachments`, the task keeps that list plus the uploads; without it the uploads are appended."""
    changes = {}
    if attachments is not None:
        try:
            changes["attachments"] = json.loads(attachments)
        except json.JSONDecodeError as e:
            raise ValidationException(
                "attachments must be a JSON list", field="attachments"
            ) from e
    uploads = [
        AttachmentUpload(
            original_name=f.filename or "",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files or []
    ]
    if not uploads and not changes:
        raise ValidationException("No files uploaded", field="files")
    outcome = await workflow.update_task(task_id, changes, actor, uploads=uploads)
    return _update_response(outcome, response)


@router.post(
    "/{task_id}/status",
    response_model=TaskUpdateResponse,
    responses={202: {"model": TaskUpdateResponse, "description": "Submitted for approval"}},
)
@limit_writes
async def submit_task_status(
    request: Request,
    response: Response,
    task_id: str,
    body: TaskStatusRequest,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
):
    outcome = await workflow.submit_task_status(task_id, body.status, actor)
    return _update_response(outcome, response)


@router.post("/{task_id}/approve", response_model=TaskResponse)
@limit_writes
async def approve_task(
    request: Request,
    task_id: str,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
    body: TaskApproveRequest | None = None,
):
    task = await workflow.approve_task(task_id, actor, comment=body.comment if body else None)
    return TaskResponse.from_result(task)


@router.post("/{task_id}/reject", response_model=TaskResponse)
@limit_writes
async def reject_task(
    request: Request,
    task_id: str,
    body: TaskRejectRequest,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
):
    task = await workflow.reject_task(task_id, actor, body.reason)
    return TaskResponse.from_result(task)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    actor: CurrentPrincipal,
    workflow: WorkflowService,
) -> Response:
    await workflow.delete_task(task_id, actor)
    return Response(status_code=204)
