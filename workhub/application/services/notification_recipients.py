"""Recipient computation (fan-out) for notification events.

Every pattern drops the triggering actor and de-duplicates recipients while
keeping first-seen order.
"""

from __future__ import annotations

from collections.abc import Iterable


def unique_recipients(
    candidates: Iterable[str | None], exclude: Iterable[str | None] = ()
) -> list[str]:
    """Return candidates without blanks, excluded IDs and duplicates (order kept)."""
    skip = {e for e in exclude if e}
    seen: set[str] = set()
    result: list[str] = []
    for principal_id in candidates:
        if not principal_id or principal_id in skip or principal_id in seen:
            continue
        seen.add(principal_id)
        result.append(principal_id)
    return result


def direct_target(recipient_id: str | None, actor_id: str | None) -> list[str]:
    """Single recipient (e.g. the assignee), unless it is the actor."""
    return unique_recipients([recipient_id], exclude=[actor_id])


def symmetric_pair(owner_id: str, assignee_id: str, actor_id: str | None) -> list[str]:
    """Owner/assignee pair for generic task updates and status changes.

    actor is assignee only -> owner; actor is owner only -> assignee;
    actor is neither -> owner and assignee (once if they are the same).
    """
    return unique_recipients([owner_id, assignee_id], exclude=[actor_id])


def approver_broadcast(
    approver_ids: Iterable[str],
    project_owner_ids: Iterable[str],
    actor_id: str | None,
) -> list[str]:
    """System-wide approvers plus the project's owners, minus the actor."""
    return unique_recipients(
        [*approver_ids, *project_owner_ids], exclude=[actor_id]
    )


def member_broadcast(
    member_ids: Iterable[str], exclude: Iterable[str | None] = ()
) -> list[str]:
    """Every member of a space or project except the excluded principals."""
    return unique_recipients(member_ids, exclude=exclude)
