"""TaskWorkflowService over in-memory fakes: permissions, state machine and fan-out."""

from unittest.mock import AsyncMock

import pytest

from fakes import PM, U1, U2, U3, U4, Workbench, build_workbench
from workhub.application.dtos.task import AttachmentUpload, CreateTaskCommand
from workhub.domain.exceptions import (
    AuthorizationException,
    FieldPermissionException,
    InvalidStateException,
    MembershipNotFoundException,
    ResourceNotFoundException,
    ValidationException,
)
from workhub.domain.value_objects import Attachment, Principal

OUTSIDER = Principal(id="u9", display_name="Nine")


class FakeAttachmentStorage:
    """Stores nothing; returns predictable attachment records."""

    def __init__(self) -> None:
        self.validated: list[list[AttachmentUpload]] = []
        self.discarded: list[str] = []

    def validate(self, uploads: list[AttachmentUpload]) -> None:
        self.validated.append(list(uploads))

    async def store(self, upload: AttachmentUpload) -> Attachment:
        key = f"tasks/attachments/{upload.original_name}"
        return Attachment(
            filename=key,
            original_name=upload.original_name,
            url=f"/files/{key}",
            size=upload.size,
            mimetype=upload.content_type,
        )

    async def discard(self, attachments: list[Attachment]) -> None:
        self.discarded.extend(a.filename for a in attachments)


def _attachment(name: str) -> Attachment:
    return Attachment(
        filename=f"tasks/attachments/{name}",
        original_name=name,
        url=f"/files/tasks/attachments/{name}",
        size=3,
        mimetype="application/pdf",
    )


def _upload(name: str) -> AttachmentUpload:
    return AttachmentUpload(original_name=name, content_type="application/pdf", data=b"pdf")


def _assert_completed_at_invariant(bench: Workbench) -> None:
    for task in bench.tasks.tasks.values():
        assert (task.completed_at is not None) == (task.status == "COMPLETED")


# ---- create ----


async def test_create_task_notifies_assignee_and_other_members(bench: Workbench) -> None:
    task = await bench.workflow.create_task(
        CreateTaskCommand(
            space_id="space-1", project_id="project-1", name="  Draft plan  ", assignee_id="u2"
        ),
        U1,
    )
    assert task.status == "PENDING"
    assert task.owner_id == "u1"
    assert task.name == "Draft plan"
    assert bench.notifications.recipients("YOU_WERE_ASSIGNED_TASK") == ["u2"]
    assert bench.notifications.recipients("CREATE_TASK") == ["u3", "u4"]
    created = bench.notifications.of_type("CREATE_TASK")[0]
    assert created.actor_name == "Una"
    assert created.data["task_id"] == task.id
    assert len(bench.queue.enqueued) == len(bench.notifications.rows)


async def test_create_task_assignee_defaults_to_creator(bench: Workbench) -> None:
    task = await bench.workflow.create_task(
        CreateTaskCommand(space_id="space-1", project_id="project-1", name="Solo"), U1
    )
    assert task.assignee_id == "u1"
    assert bench.notifications.of_type("YOU_WERE_ASSIGNED_TASK") == []


async def test_create_task_rejects_non_member_assignee(bench: Workbench) -> None:
    with pytest.raises(MembershipNotFoundException):
        await bench.workflow.create_task(
            CreateTaskCommand(
                space_id="space-1", project_id="project-1", name="X", assignee_id="u9"
            ),
            U1,
        )
    assert bench.tasks.writes == []


async def test_create_task_requires_name_and_valid_priority(bench: Workbench) -> None:
    with pytest.raises(ValidationException):
        await bench.workflow.create_task(
            CreateTaskCommand(space_id="space-1", project_id="project-1", name="   "), U1
        )
    with pytest.raises(ValidationException) as exc_info:
        await bench.workflow.create_task(
            CreateTaskCommand(
                space_id="space-1", project_id="project-1", name="X", priority="URGENT"
            ),
            U1,
        )
    assert exc_info.value.details == {"field": "priority"}


# ---- assignee submits COMPLETED ----


async def test_assignee_completion_is_submitted_for_approval(bench: Workbench) -> None:
    task = bench.tasks.put(owner_id="u1", assignee_id="u2", status="PENDING")

    outcome = await bench.workflow.update_task(task.id, {"status": "COMPLETED"}, U2)

    assert outcome.task.status == "PENDING_APPROVAL"
    assert outcome.task.completed_at is None
    assert outcome.status_rewritten
    assert outcome.requested_status == "COMPLETED"
    assert outcome.changed_fields == ("status",)
    assert bench.tasks.tasks[task.id].status == "PENDING_APPROVAL"
    assert bench.notifications.recipients("UPDATE_TASK") == ["u1"]
    assert bench.notifications.recipients("TASK_PENDING_APPROVAL") == ["pm", "u3"]
    assert bench.notifications.of_type("TASK_STATUS_CHANGED") == []
    assert all(n.recipient_id != "u2" for n in bench.notifications.rows)
    _assert_completed_at_invariant(bench)


async def test_submit_task_status_goes_through_the_same_path(bench: Workbench) -> None:
    task = bench.tasks.put(status="PROCESSING")
    outcome = await bench.workflow.submit_task_status(task.id, "COMPLETED", U2)
    assert outcome.task.status == "PENDING_APPROVAL"
    assert outcome.status_rewritten


async def test_assignee_moves_task_to_processing(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING")
    outcome = await bench.workflow.update_task(task.id, {"status": "PROCESSING"}, U2)
    assert outcome.task.status == "PROCESSING"
    assert not outcome.status_rewritten
    changed = bench.notifications.of_type("TASK_STATUS_CHANGED")
    assert [n.recipient_id for n in changed] == ["u1"]
    assert changed[0].data["old_status"] == "PENDING"
    assert changed[0].data["new_status"] == "PROCESSING"


async def test_explicit_move_to_pending_approval_notifies_approvers(bench: Workbench) -> None:
    task = bench.tasks.put(status="PROCESSING")
    await bench.workflow.update_task(task.id, {"status": "PENDING_APPROVAL"}, U3)
    assert bench.notifications.recipients("TASK_STATUS_CHANGED") == ["u1", "u2"]
    assert bench.notifications.recipients("TASK_PENDING_APPROVAL") == ["pm"]


# ---- approve / reject ----


async def test_project_owner_approves_with_comment(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")

    approved = await bench.workflow.approve_task(task.id, U3, comment="LGTM")

    assert approved.status == "COMPLETED"
    assert approved.approved_by == "u3"
    assert approved.approved_at is not None
    assert approved.completed_at is not None
    assert approved.review_comment == "LGTM"
    approvals = bench.notifications.of_type("TASK_APPROVED")
    assert [n.recipient_id for n in approvals] == ["u2"]
    assert approvals[0].data["comment"] == "LGTM"
    _assert_completed_at_invariant(bench)


async def test_system_approver_approves_without_project_membership(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")
    approved = await bench.workflow.approve_task(task.id, PM)
    assert approved.status == "COMPLETED"
    assert approved.approved_by == "pm"


async def test_approve_requires_pending_approval_and_writes_nothing(bench: Workbench) -> None:
    task = bench.tasks.put(status="PROCESSING")
    with pytest.raises(InvalidStateException):
        await bench.workflow.approve_task(task.id, U3)
    assert bench.tasks.writes == []
    assert bench.notifications.rows == []


async def test_approve_by_plain_member_is_denied(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")
    with pytest.raises(AuthorizationException):
        await bench.workflow.approve_task(task.id, U4)
    with pytest.raises(AuthorizationException):
        await bench.workflow.approve_task(task.id, U1)


async def test_approve_lost_race_is_invalid_state(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")
    bench.tasks.update_if_status = AsyncMock(return_value=None)
    with pytest.raises(InvalidStateException):
        await bench.workflow.approve_task(task.id, U3)
    assert bench.notifications.rows == []


async def test_reject_sends_task_back_to_processing(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")

    rejected = await bench.workflow.reject_task(task.id, U3, "  Missing totals ")

    assert rejected.status == "PROCESSING"
    assert rejected.completed_at is None
    assert rejected.rejected_by == "u3"
    assert rejected.review_comment == "Missing totals"
    rejections = bench.notifications.of_type("TASK_REJECTED")
    assert [n.recipient_id for n in rejections] == ["u2"]
    assert rejections[0].data["reason"] == "Missing totals"


@pytest.mark.parametrize("reason", ["", "   "])
async def test_reject_requires_reason(bench: Workbench, reason: str) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")
    with pytest.raises(ValidationException) as exc_info:
        await bench.workflow.reject_task(task.id, U3, reason)
    assert exc_info.value.details == {"field": "reason"}
    assert bench.tasks.tasks[task.id].status == "PENDING_APPROVAL"


async def test_reject_on_wrong_status_is_invalid_state(bench: Workbench) -> None:
    task = bench.tasks.put(status="COMPLETED")
    with pytest.raises(InvalidStateException):
        await bench.workflow.reject_task(task.id, U3, "late")
    assert bench.tasks.writes == []


# ---- field permissions ----


async def test_task_owner_cannot_change_status_and_nothing_is_written(bench: Workbench) -> None:
    task = bench.tasks.put(owner_id="u1", assignee_id="u2")
    with pytest.raises(FieldPermissionException) as exc_info:
        await bench.workflow.update_task(task.id, {"status": "PROCESSING", "name": "x"}, U1)
    assert exc_info.value.details["fields"] == ["status"]
    assert bench.tasks.writes == []
    assert bench.notifications.rows == []


async def test_assignee_cannot_rename(bench: Workbench) -> None:
    task = bench.tasks.put()
    with pytest.raises(FieldPermissionException) as exc_info:
        await bench.workflow.update_task(task.id, {"name": "mine"}, U2)
    assert exc_info.value.details["fields"] == ["name"]


async def test_stranger_is_denied_before_state_checks(bench: Workbench) -> None:
    task = bench.tasks.put(status="COMPLETED", completed_at=None)
    with pytest.raises(AuthorizationException):
        await bench.workflow.update_task(task.id, {"status": "PENDING"}, OUTSIDER)


async def test_missing_task_is_not_found(bench: Workbench) -> None:
    with pytest.raises(ResourceNotFoundException):
        await bench.workflow.update_task("nope", {"name": "x"}, U1)


async def test_owner_reassigns_and_new_assignee_is_told(bench: Workbench) -> None:
    task = bench.tasks.put(owner_id="u1", assignee_id="u2")
    outcome = await bench.workflow.update_task(task.id, {"assignee_id": "u4"}, U1)
    assert outcome.task.assignee_id == "u4"
    assert bench.notifications.recipients("YOU_WERE_ASSIGNED_TASK") == ["u4"]
    assert bench.notifications.recipients("UPDATE_TASK") == ["u4"]


async def test_reassign_to_non_member_fails(bench: Workbench) -> None:
    task = bench.tasks.put()
    with pytest.raises(MembershipNotFoundException):
        await bench.workflow.update_task(task.id, {"assignee_id": "u9"}, U1)


async def test_empty_update_writes_nothing(bench: Workbench) -> None:
    task = bench.tasks.put()
    outcome = await bench.workflow.update_task(task.id, {}, U1)
    assert outcome.task == task
    assert outcome.changed_fields == ()
    assert bench.tasks.writes == []


async def test_concurrent_status_change_is_invalid_state(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING")
    bench.tasks.update_if_status = AsyncMock(return_value=None)
    with pytest.raises(InvalidStateException):
        await bench.workflow.update_task(task.id, {"status": "PROCESSING"}, U2)
    assert bench.notifications.rows == []


# ---- elevated status writes and reopening ----


async def test_elevated_completion_sets_completed_at(bench: Workbench) -> None:
    task = bench.tasks.put(status="PROCESSING")
    outcome = await bench.workflow.update_task(task.id, {"status": "COMPLETED"}, U3)
    assert outcome.task.status == "COMPLETED"
    assert outcome.task.completed_at is not None
    assert not outcome.status_rewritten
    _assert_completed_at_invariant(bench)


async def test_completed_task_cannot_be_reopened_by_default(bench: Workbench) -> None:
    task = bench.tasks.put(status="PENDING_APPROVAL")
    await bench.workflow.approve_task(task.id, U3)
    with pytest.raises(InvalidStateException):
        await bench.workflow.update_task(task.id, {"status": "PROCESSING"}, U3)


async def test_reopen_clears_completed_at_when_enabled() -> None:
    bench = build_workbench(allow_reopen_completed=True)
    task = bench.tasks.put(status="PENDING_APPROVAL")
    await bench.workflow.approve_task(task.id, U3)
    outcome = await bench.workflow.update_task(task.id, {"status": "PROCESSING"}, U3)
    assert outcome.task.status == "PROCESSING"
    assert outcome.task.completed_at is None
    _assert_completed_at_invariant(bench)


async def test_assignee_cannot_reopen_even_when_enabled() -> None:
    bench = build_workbench(allow_reopen_completed=True)
    task = bench.tasks.put(status="PENDING_APPROVAL")
    await bench.workflow.approve_task(task.id, U3)
    with pytest.raises(InvalidStateException):
        await bench.workflow.update_task(task.id, {"status": "PROCESSING"}, U2)


# ---- attachments ----


async def test_uploads_are_appended_after_existing_attachments() -> None:
    storage = FakeAttachmentStorage()
    bench = build_workbench(attachment_storage=storage)
    task = bench.tasks.put(attachments=(_attachment("a1.pdf"), _attachment("a2.pdf")))

    outcome = await bench.workflow.update_task(
        task.id, {}, U2, uploads=[_upload("b1.pdf"), _upload("b2.pdf")]
    )

    assert [a.original_name for a in outcome.task.attachments] == [
        "a1.pdf",
        "a2.pdf",
        "b1.pdf",
        "b2.pdf",
    ]
    assert outcome.changed_fields == ("attachments",)
    assert len(storage.validated) == 1
    assert storage.discarded == []


async def test_retained_list_replaces_current_then_uploads_follow() -> None:
    bench = build_workbench(attachment_storage=FakeAttachmentStorage())
    a1, a2 = _attachment("a1.pdf"), _attachment("a2.pdf")
    task = bench.tasks.put(attachments=(a1, a2))

    outcome = await bench.workflow.update_task(
        task.id, {"attachments": [a2.to_dict()]}, U2, uploads=[_upload("c.pdf")]
    )

    assert [a.original_name for a in outcome.task.attachments] == ["a2.pdf", "c.pdf"]


async def test_uploads_without_storage_are_rejected(bench: Workbench) -> None:
    task = bench.tasks.put()
    with pytest.raises(ValidationException):
        await bench.workflow.update_task(task.id, {}, U2, uploads=[_upload("x.pdf")])


async def test_malformed_attachment_entry_is_rejected(bench: Workbench) -> None:
    task = bench.tasks.put()
    with pytest.raises(ValidationException) as exc_info:
        await bench.workflow.update_task(task.id, {"attachments": [{"url": "/x"}]}, U2)
    assert exc_info.value.details == {"field": "attachments"}


async def test_uploads_are_discarded_when_status_changed_concurrently() -> None:
    storage = FakeAttachmentStorage()
    bench = build_workbench(attachment_storage=storage)
    task = bench.tasks.put(status="PENDING")
    bench.tasks.update_if_status = AsyncMock(return_value=None)

    with pytest.raises(InvalidStateException):
        await bench.workflow.update_task(
            task.id, {"status": "PROCESSING"}, U2, uploads=[_upload("late.pdf")]
        )

    assert storage.discarded == ["tasks/attachments/late.pdf"]
    assert bench.tasks.tasks[task.id].attachments == ()
    assert bench.notifications.rows == []


async def test_uploads_are_discarded_when_a_later_upload_fails() -> None:
    storage = FakeAttachmentStorage()
    store = storage.store

    async def fail_on_second(upload: AttachmentUpload) -> Attachment:
        if upload.original_name == "second.pdf":
            raise OSError("disk full")
        return await store(upload)

    storage.store = fail_on_second
    bench = build_workbench(attachment_storage=storage)
    task = bench.tasks.put()

    with pytest.raises(OSError):
        await bench.workflow.update_task(
            task.id, {}, U2, uploads=[_upload("first.pdf"), _upload("second.pdf")]
        )

    assert storage.discarded == ["tasks/attachments/first.pdf"]


# ---- delete ----


async def test_delete_notifies_members_before_removal(bench: Workbench) -> None:
    task = bench.tasks.put()
    await bench.workflow.delete_task(task.id, U2)
    assert task.id not in bench.tasks.tasks
    assert bench.notifications.recipients("DELETE_TASK") == ["u3", "u1", "u4"]
    deleted = bench.notifications.of_type("DELETE_TASK")[0]
    assert deleted.data["task_name"] == task.name


async def test_delete_by_plain_member_is_denied(bench: Workbench) -> None:
    task = bench.tasks.put()
    with pytest.raises(AuthorizationException):
        await bench.workflow.delete_task(task.id, U4)
    assert task.id in bench.tasks.tasks
