from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..core.constants import DEFAULT_DISPLAY_PREFIX, UNKNOWN_USER_NAME
from ..core.enums import TaskPriority, TaskStatus
from ..projects.repository import ProjectRepository
from ..users.repository import UserRepository
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskView:
    """Read-model returned by every task operation."""

    task_id: int
    display_task_id: str
    title: str
    description: Optional[str]
    assigned_to_user_id: int
    assigned_to_user_name: str
    created_by_user_id: int
    created_by_user_name: str
    project_id: Optional[int]
    project_name: Optional[str]
    estimated_hours: Decimal
    actual_hours_spent: Optional[Decimal]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    is_approved: bool
    approved_at: Optional[datetime]
    approved_by_user_id: Optional[int]
    approved_by_user_name: Optional[str]


class TaskViewBuilder:
    """Joins a task with its time-log total and related display names.

    Enrichment never fails the read: a missing user or a lookup error becomes
    the "Unknown" placeholder, and an unavailable time log leaves
    ``actual_hours_spent`` as None.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        projects: Optional[ProjectRepository] = None,
        *,
        display_prefix: str = DEFAULT_DISPLAY_PREFIX,
    ):
        self._tasks = tasks
        self._users = users
        self._projects = projects
        self._display_prefix = display_prefix

    def display_id(self, task_id: int) -> str:
        return f"{self._display_prefix}-{int(task_id):03d}"

    def user_name(self, user_id: int, *, cache: Optional[Dict[int, str]] = None) -> str:
        if cache is not None and user_id in cache:
            return cache[user_id]
        try:
            user = self._users.get_by_id(int(user_id))
        except Exception:
            logger.warning("User lookup failed for user %s", user_id, exc_info=True)
            user = None
        name = user.name if user else UNKNOWN_USER_NAME
        if cache is not None:
            cache[user_id] = name
        return name

    def project_name(self, project_id: Optional[int]) -> Optional[str]:
        if project_id is None or self._projects is None:
            return None
        try:
            return self._projects.get_name(int(project_id))
        except Exception:
            logger.warning("Project lookup failed for project %s", project_id, exc_info=True)
            return None

    def actual_hours(self, task_id: int) -> Optional[Decimal]:
        try:
            return self._tasks.sum_hours(int(task_id))
        except Exception:
            logger.warning("Time log total failed for task %s", task_id, exc_info=True)
            return None

    def build(self, task: Task, *, names: Optional[Dict[int, str]] = None) -> TaskView:
        names = {} if names is None else names
        approver = (
            self.user_name(task.approved_by_user_id, cache=names) if task.approved_by_user_id is not None else None
        )
        return TaskView(
            task_id=task.task_id,
            display_task_id=self.display_id(task.task_id),
            title=task.title,
            description=task.description,
            assigned_to_user_id=task.assigned_to_user_id,
            assigned_to_user_name=self.user_name(task.assigned_to_user_id, cache=names),
            created_by_user_id=task.created_by_user_id,
            created_by_user_name=self.user_name(task.created_by_user_id, cache=names),
            project_id=task.project_id,
            project_name=self.project_name(task.project_id),
            estimated_hours=task.estimated_hours,
            actual_hours_spent=self.actual_hours(task.task_id),
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
            is_approved=task.is_approved,
            approved_at=task.approved_at,
            approved_by_user_id=task.approved_by_user_id,
            approved_by_user_name=approver,
        )

    def build_many(self, tasks: Iterable[Task]) -> List[TaskView]:
        names: Dict[int, str] = {}
        return [self.build(t, names=names) for t in tasks]
