from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.timetrack.timetrack.core.enums import NotificationStatus, Role, TaskPriority, TaskStatus, UserStatus
from src.timetrack.timetrack.notifications.model import Notification
from src.timetrack.timetrack.notifications.service import NotificationService
from src.timetrack.timetrack.tasks.model import Task, TimeLogEntry
from src.timetrack.timetrack.tasks.service import TaskService
from src.timetrack.timetrack.tasks.views import TaskViewBuilder
from src.timetrack.timetrack.users.model import Actor, User

NOW = datetime(2026, 2, 10, 9, 0, 0)

MANAGER_ID = 1
EMPLOYEE_ID = 42
OTHER_EMPLOYEE_ID = 43
INACTIVE_ID = 7
ADMIN_ID = 99


@dataclass
class InMemoryUsers:
    users: dict[int, User] = field(default_factory=dict)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))


@dataclass
class InMemoryProjects:
    names: dict[int, str] = field(default_factory=dict)

    def get_name(self, project_id: int) -> Optional[str]:
        return self.names.get(int(project_id))


class InMemoryTasks:
    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self.entries: list[TimeLogEntry] = []
        self._next_id = 1

    def get_by_id(self, task_id):
        return self.tasks.get(int(task_id))

    def list_by_assignee(self, user_id):
        items = [t for t in self.tasks.values() if t.assigned_to_user_id == int(user_id)]
        items.sort(key=lambda t: t.created_at, reverse=True)
        items.sort(key=lambda t: (t.due_date is None, t.due_date or datetime.max))
        return items

    def list_by_creator(self, creator_id):
        items = [t for t in self.tasks.values() if t.created_by_user_id == int(creator_id)]
        return sorted(items, key=lambda t: t.created_at, reverse=True)

    def list_overdue(self, *, now):
        items = [
            t
            for t in self.tasks.values()
            if t.due_date is not None and t.due_date < now and t.status != TaskStatus.COMPLETED
        ]
        return sorted(items, key=lambda t: t.due_date)

    def add(self, task):
        tid = self._next_id
        self._next_id += 1
        self.tasks[tid] = replace(task, task_id=tid)
        return tid

    def update(self, task):
        if task.task_id not in self.tasks:
            return False
        self.tasks[task.task_id] = task
        return True

    def delete_by_id(self, task_id):
        if int(task_id) not in self.tasks:
            return False
        del self.tasks[int(task_id)]
        self.entries = [e for e in self.entries if e.task_id != int(task_id)]
        return True

    def add_time_entry(self, entry):
        eid = len(self.entries) + 1
        self.entries.append(replace(entry, entry_id=eid))
        return eid

    def sum_hours(self, task_id):
        return sum((e.hours_spent for e in self.entries if e.task_id == int(task_id)), Decimal("0"))

    def list_time_entries(self, task_id):
        return [e for e in self.entries if e.task_id == int(task_id)]


class FakeTransactions:
    def __init__(self):
        self.committed = 0
        self.rolled_back = 0

    @contextmanager
    def transaction(self):
        try:
            yield self
        except Exception:
            self.rolled_back += 1
            raise
        self.committed += 1


class FakeNotificationRepo:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def add(self, *, user_id, notification_type, message):
        if self.fail:
            raise ConnectionError("notification store unavailable")
        self.sent.append({"user_id": user_id, "type": notification_type, "message": message})
        return len(self.sent)

    def list_for_user(self, user_id, *, limit=50):
        return [
            Notification(
                notification_id=i + 1,
                user_id=n["user_id"],
                notification_type=n["type"],
                message=n["message"],
                status=NotificationStatus.UNREAD,
                created_at=NOW,
            )
            for i, n in enumerate(self.sent)
            if n["user_id"] == user_id
        ][:limit]


class Clock:
    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_task(task_id: int = 1, **overrides) -> Task:
    values = dict(
        task_id=task_id,
        title="Prepare report",
        description=None,
        assigned_to_user_id=EMPLOYEE_ID,
        created_by_user_id=MANAGER_ID,
        estimated_hours=Decimal("5"),
        status=TaskStatus.PENDING,
        priority=TaskPriority.MEDIUM,
        created_at=NOW - timedelta(days=1),
    )
    values.update(overrides)
    return Task(**values)


@pytest.fixture
def users():
    return InMemoryUsers(
        {
            MANAGER_ID: User(user_id=MANAGER_ID, name="Mara Manager", email="m@x.io", role=Role.MANAGER),
            EMPLOYEE_ID: User(user_id=EMPLOYEE_ID, name="Eli Employee", email="e@x.io", role=Role.EMPLOYEE),
            OTHER_EMPLOYEE_ID: User(user_id=OTHER_EMPLOYEE_ID, name="Ola Other", email="o@x.io", role=Role.EMPLOYEE),
            INACTIVE_ID: User(
                user_id=INACTIVE_ID,
                name="Ina Inactive",
                email="i@x.io",
                role=Role.EMPLOYEE,
                status=UserStatus.INACTIVE,
            ),
            ADMIN_ID: User(user_id=ADMIN_ID, name="Ada Admin", email="a@x.io", role=Role.ADMIN),
        }
    )


@pytest.fixture
def tasks_repo():
    return InMemoryTasks()


@pytest.fixture
def notifications_repo():
    return FakeNotificationRepo()


@pytest.fixture
def transactions():
    return FakeTransactions()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def service(tasks_repo, users, notifications_repo, transactions, clock):
    views = TaskViewBuilder(tasks_repo, users, InMemoryProjects({5: "Internal Tools"}))
    return TaskService(
        tasks_repo,
        users,
        NotificationService(notifications_repo),
        transactions,
        views=views,
        clock=clock,
    )


@pytest.fixture
def manager():
    return Actor(user_id=MANAGER_ID, role=Role.MANAGER)


@pytest.fixture
def employee():
    return Actor(user_id=EMPLOYEE_ID, role=Role.EMPLOYEE)


@pytest.fixture
def other_employee():
    return Actor(user_id=OTHER_EMPLOYEE_ID, role=Role.EMPLOYEE)


@pytest.fixture
def admin():
    return Actor(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def inactive_user_id():
    return INACTIVE_ID


@pytest.fixture
def seed_task(tasks_repo):
    """Insert a task directly into the repository, bypassing the service."""

    def _seed(**overrides) -> Task:
        task = make_task(task_id=0, **overrides)
        tid = tasks_repo.add(task)
        return tasks_repo.get_by_id(tid)

    return _seed
