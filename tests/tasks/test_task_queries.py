from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from src.timetrack.timetrack.core.enums import TaskStatus
from src.timetrack.timetrack.core.exceptions import AuthorizationError, NotFoundError
from src.timetrack.timetrack.tasks.model import TimeLogEntry
from src.timetrack.timetrack.tasks.views import TaskViewBuilder

from conftest import NOW, InMemoryTasks, make_task


def test_get_task_unknown_id_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_task(404)


def test_user_tasks_are_ordered_by_due_date(service, seed_task):
    late = seed_task(title="late", due_date=NOW + timedelta(days=5))
    undated = seed_task(title="undated")
    soon = seed_task(title="soon", due_date=NOW + timedelta(days=1))
    seed_task(title="someone else's", assigned_to_user_id=43)

    views = service.get_user_tasks(42)

    assert [v.task_id for v in views] == [soon.task_id, late.task_id, undated.task_id]


def test_created_tasks_requires_manager(service, employee):
    with pytest.raises(AuthorizationError):
        service.get_created_tasks(employee)


def test_created_tasks_lists_only_own_tasks_newest_first(service, manager, seed_task):
    old = seed_task(created_at=NOW - timedelta(days=3))
    new = seed_task(created_at=NOW - timedelta(hours=1))
    seed_task(created_by_user_id=99)

    views = service.get_created_tasks(manager)

    assert [v.task_id for v in views] == [new.task_id, old.task_id]


def test_overdue_tasks_exclude_completed_and_sort_by_due_date(service, manager, seed_task):
    older = seed_task(due_date=NOW - timedelta(days=3), status=TaskStatus.IN_PROGRESS)
    newer = seed_task(due_date=NOW - timedelta(days=1))
    seed_task(due_date=NOW - timedelta(days=2), status=TaskStatus.COMPLETED)
    seed_task(due_date=NOW + timedelta(days=2))
    seed_task()

    views = service.get_overdue_tasks(manager)

    assert [v.task_id for v in views] == [older.task_id, newer.task_id]


def test_overdue_tasks_require_manager(service, employee):
    with pytest.raises(AuthorizationError):
        service.get_overdue_tasks(employee)


def test_pending_approval_lists_completed_unapproved_tasks_of_creator(service, manager, seed_task):
    waiting = seed_task(status=TaskStatus.COMPLETED)
    seed_task(status=TaskStatus.APPROVED, is_approved=True)
    seed_task(status=TaskStatus.IN_PROGRESS)
    seed_task(status=TaskStatus.COMPLETED, created_by_user_id=99)

    views = service.get_tasks_pending_approval(manager)

    assert [v.task_id for v in views] == [waiting.task_id]


def test_view_uses_placeholder_for_missing_users(service, seed_task):
    task = seed_task(assigned_to_user_id=500, created_by_user_id=501)

    view = service.get_task(task.task_id)

    assert view.assigned_to_user_name == "Unknown"
    assert view.created_by_user_name == "Unknown"
    assert view.approved_by_user_name is None
    assert view.project_name is None


class ExplodingUsers:
    def get_by_id(self, user_id):
        raise ConnectionError("user service down")


class CountingUsers:
    def __init__(self, inner):
        self._inner = inner
        self.calls = 0

    def get_by_id(self, user_id):
        self.calls += 1
        return self._inner.get_by_id(user_id)


def test_view_builder_degrades_when_user_lookup_fails():
    tasks = InMemoryTasks()
    tid = tasks.add(make_task(task_id=0))
    builder = TaskViewBuilder(tasks, ExplodingUsers())

    view = builder.build(tasks.get_by_id(tid))

    assert view.assigned_to_user_name == "Unknown"
    assert view.created_by_user_name == "Unknown"


def test_view_builder_sums_time_log_and_formats_display_id(users):
    tasks = InMemoryTasks()
    tid = tasks.add(make_task(task_id=0))
    for hours in ("1.5", "3"):
        tasks.add_time_entry(
            TimeLogEntry(
                entry_id=0,
                task_id=tid,
                user_id=42,
                work_date=NOW.date(),
                hours_spent=Decimal(hours),
                work_description=None,
                created_at=NOW,
            )
        )
    builder = TaskViewBuilder(tasks, users, display_prefix="TT")

    view = builder.build(tasks.get_by_id(tid))

    assert view.actual_hours_spent == Decimal("4.5")
    assert view.display_task_id == "TT-001"


def test_build_many_looks_each_user_up_once(users):
    tasks = InMemoryTasks()
    for _ in range(3):
        tasks.add(make_task(task_id=0))
    counting = CountingUsers(users)
    builder = TaskViewBuilder(tasks, counting)

    views = builder.build_many(tasks.list_by_creator(1))

    assert len(views) == 3
    assert counting.calls == 2


class BrokenTimeLog(InMemoryTasks):
    def sum_hours(self, task_id):
        raise ConnectionError("time log unavailable")


def test_view_builder_degrades_when_time_log_total_fails(users):
    tasks = BrokenTimeLog()
    tid = tasks.add(make_task(task_id=0))
    builder = TaskViewBuilder(tasks, users)

    view = builder.build(tasks.get_by_id(tid))

    assert view.actual_hours_spent is None
    assert view.assigned_to_user_name == "Eli Employee"
