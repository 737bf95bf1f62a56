"""Task status state machine.

Every status change, whether it comes from a dedicated transition
(start/complete/approve/reject), the generic status update, a field edit,
the creation back-fill or the time-log auto-promotion, goes through
``plan_transition`` so the timestamp/flag rules live in one place:

    target       started_at      completed_at    is_approved  approved_at  approved_by
    Pending      cleared         cleared         False        cleared      cleared
    InProgress   kept, else now  cleared         False        cleared      cleared
    Completed    kept, else now  now             False        cleared      cleared
    Approved     kept, else now  kept, else now  True         now          actor
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import TaskStatus
from ..core.exceptions import PreconditionError
from .model import Task


@dataclass(frozen=True)
class StatusChange:
    """Full delta produced by a transition; applying it overwrites every field."""

    status: TaskStatus
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    is_approved: bool
    approved_at: Optional[datetime]
    approved_by_user_id: Optional[int]

    def apply(self, task: Task) -> Task:
        return replace(
            task,
            status=self.status,
            started_at=self.started_at,
            completed_at=self.completed_at,
            is_approved=self.is_approved,
            approved_at=self.approved_at,
            approved_by_user_id=self.approved_by_user_id,
        )


def plan_transition(
    task: Task,
    requested: TaskStatus,
    *,
    now: datetime,
    actor_id: Optional[int] = None,
) -> Optional[StatusChange]:
    """Return the delta moving ``task`` to ``requested``, or None if already there."""
    if requested == task.status:
        return None

    if requested == TaskStatus.PENDING:
        return StatusChange(
            status=requested,
            started_at=None,
            completed_at=None,
            is_approved=False,
            approved_at=None,
            approved_by_user_id=None,
        )

    started_at = task.started_at or now

    if requested == TaskStatus.IN_PROGRESS:
        return StatusChange(
            status=requested,
            started_at=started_at,
            completed_at=None,
            is_approved=False,
            approved_at=None,
            approved_by_user_id=None,
        )

    if requested == TaskStatus.COMPLETED:
        return StatusChange(
            status=requested,
            started_at=started_at,
            completed_at=now,
            is_approved=False,
            approved_at=None,
            approved_by_user_id=None,
        )

    return StatusChange(
        status=TaskStatus.APPROVED,
        started_at=started_at,
        completed_at=task.completed_at or now,
        is_approved=True,
        approved_at=now,
        approved_by_user_id=actor_id,
    )


def require_status(task: Task, required: TaskStatus, *, action: str) -> None:
    if task.status != required:
        raise PreconditionError(
            f"Cannot {action} task. Current status: {task.status.value}. "
            f"Only '{required.value}' tasks can be {_past_tense(action)}.",
            current_status=task.status.value,
            required_status=required.value,
        )


def require_deletable(task: Task) -> None:
    if task.status == TaskStatus.COMPLETED or task.is_approved:
        raise PreconditionError(
            f"Cannot delete task. Current status: {task.status.value}. Completed or approved tasks cannot be deleted.",
            current_status=task.status.value,
        )


def _past_tense(action: str) -> str:
    return {
        "start": "started",
        "complete": "completed",
        "approve": "approved",
        "reject": "rejected",
    }.get(action, action)
