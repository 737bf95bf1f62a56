from __future__ import annotations

from datetime import datetime

import pytest

from src.timetrack.timetrack.core.enums import TaskStatus
from src.timetrack.timetrack.core.exceptions import PreconditionError
from src.timetrack.timetrack.tasks.lifecycle import plan_transition, require_deletable, require_status

from conftest import make_task

T0 = datetime(2026, 2, 1, 8, 0)
T1 = datetime(2026, 2, 2, 8, 0)
NOW = datetime(2026, 2, 3, 8, 0)


def approved_task():
    return make_task(
        status=TaskStatus.APPROVED,
        started_at=T0,
        completed_at=T1,
        is_approved=True,
        approved_at=T1,
        approved_by_user_id=1,
    )


def test_same_status_is_a_noop():
    assert plan_transition(make_task(status=TaskStatus.IN_PROGRESS), TaskStatus.IN_PROGRESS, now=NOW) is None


def test_pending_to_in_progress_sets_started_at():
    change = plan_transition(make_task(), TaskStatus.IN_PROGRESS, now=NOW)

    assert change.status == TaskStatus.IN_PROGRESS
    assert change.started_at == NOW
    assert change.completed_at is None
    assert change.is_approved is False


def test_completed_keeps_original_start_and_resets_approval():
    task = make_task(status=TaskStatus.IN_PROGRESS, started_at=T0)

    change = plan_transition(task, TaskStatus.COMPLETED, now=NOW)

    assert change.started_at == T0
    assert change.completed_at == NOW
    assert change.is_approved is False
    assert change.approved_at is None


def test_approved_from_completed_keeps_completion_time_and_records_actor():
    task = make_task(status=TaskStatus.COMPLETED, started_at=T0, completed_at=T1)

    change = plan_transition(task, TaskStatus.APPROVED, now=NOW, actor_id=9)

    assert change.completed_at == T1
    assert change.is_approved is True
    assert change.approved_at == NOW
    assert change.approved_by_user_id == 9


def test_approved_straight_from_pending_backfills_every_timestamp():
    change = plan_transition(make_task(), TaskStatus.APPROVED, now=NOW, actor_id=1)

    assert (change.started_at, change.completed_at, change.approved_at) == (NOW, NOW, NOW)
    assert change.is_approved is True


@pytest.mark.parametrize("start", [TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.APPROVED])
def test_regressing_to_pending_clears_all_downstream_state(start):
    task = approved_task() if start == TaskStatus.APPROVED else make_task(status=start, started_at=T0, completed_at=T1)

    updated = plan_transition(task, TaskStatus.PENDING, now=NOW).apply(task)

    assert updated.status == TaskStatus.PENDING
    assert updated.started_at is None
    assert updated.completed_at is None
    assert updated.is_approved is False
    assert updated.approved_at is None
    assert updated.approved_by_user_id is None


def test_regressing_approved_to_in_progress_keeps_start_and_clears_approval():
    updated = plan_transition(approved_task(), TaskStatus.IN_PROGRESS, now=NOW).apply(approved_task())

    assert updated.started_at == T0
    assert updated.completed_at is None
    assert updated.is_approved is False
    assert updated.approved_by_user_id is None


def test_apply_leaves_non_lifecycle_fields_untouched():
    task = make_task(title="Keep me", due_date=T1)

    updated = plan_transition(task, TaskStatus.COMPLETED, now=NOW).apply(task)

    assert updated.title == "Keep me"
    assert updated.due_date == T1
    assert updated.task_id == task.task_id


def test_require_status_names_current_and_required_state():
    with pytest.raises(PreconditionError) as exc:
        require_status(make_task(status=TaskStatus.IN_PROGRESS), TaskStatus.PENDING, action="start")

    assert "InProgress" in str(exc.value)
    assert "Pending" in str(exc.value)
    assert exc.value.current_status == "InProgress"
    assert exc.value.required_status == "Pending"


@pytest.mark.parametrize(
    "task",
    [
        make_task(status=TaskStatus.COMPLETED),
        make_task(status=TaskStatus.APPROVED, is_approved=True),
    ],
)
def test_completed_or_approved_tasks_are_not_deletable(task):
    with pytest.raises(PreconditionError):
        require_deletable(task)


def test_in_progress_task_is_deletable():
    require_deletable(make_task(status=TaskStatus.IN_PROGRESS))
