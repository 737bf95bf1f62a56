from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import (
    optional_text,
    parse_decimal,
    parse_enum,
    require_max_length,
    require_non_empty,
    require_places,
    require_range,
)
from ..core.constants import (
    DESCRIPTION_MAX_LENGTH,
    HOURS_DECIMAL_PLACES,
    MAX_ESTIMATED_HOURS,
    MAX_HOURS_PER_ENTRY,
    MIN_ESTIMATED_HOURS,
    MIN_HOURS_PER_ENTRY,
    TITLE_MAX_LENGTH,
    WORK_DESCRIPTION_MAX_LENGTH,
)
from ..core.enums import NotificationType, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, PreconditionError, ValidationError
from ..notifications.service import NotificationService
from ..users.model import Actor
from ..users.repository import UserRepository
from .lifecycle import plan_transition, require_deletable, require_status
from .model import Task, TaskInput, TimeLogEntry, TimeLogInput
from .repository import TaskRepository, TransactionManager
from .views import TaskView, TaskViewBuilder

logger = logging.getLogger(__name__)


class TaskService:
    """Task lifecycle and approval workflow engine.

    Each command runs one read-modify-write inside ``transactions.transaction()``.
    Notifications are sent only after the transaction has committed and are
    best-effort.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        notifier: NotificationService,
        transactions: TransactionManager,
        *,
        views: TaskViewBuilder,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._tasks = tasks
        self._users = users
        self._notifier = notifier
        self._transactions = transactions
        self._views = views
        self._clock = clock

    # -------- Guards --------
    @staticmethod
    def _require_manager(actor: Actor, action: str) -> None:
        if not actor.is_manager:
            raise AuthorizationError(f"Only managers or admins can {action}")

    @staticmethod
    def _require_assignee(task: Task, actor: Actor, action: str) -> None:
        if task.assigned_to_user_id != actor.user_id:
            raise AuthorizationError(f"You can only {action} tasks assigned to you")

    def _load(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return task

    def _require_active_assignee(self, user_id: int) -> None:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise PreconditionError("Cannot assign task to inactive or non-existent user")

    def _save(self, task: Task) -> None:
        if not self._tasks.update(task):
            raise NotFoundError(f"Task with ID {task.task_id} not found")

    @staticmethod
    def _clean_input(data: TaskInput) -> Dict[str, Any]:
        title = require_non_empty(data.title, "Title")
        require_max_length(title, "Title", TITLE_MAX_LENGTH)
        description = optional_text(data.description, "Description")
        require_max_length(description, "Description", DESCRIPTION_MAX_LENGTH)

        hours = parse_decimal(data.estimated_hours, "Estimated hours")
        require_range(hours, "Estimated hours", low=MIN_ESTIMATED_HOURS, high=MAX_ESTIMATED_HOURS)
        require_places(hours, "Estimated hours", HOURS_DECIMAL_PLACES)

        try:
            assignee = int(data.assigned_to_user_id)
        except (TypeError, ValueError):
            raise ValidationError("Assigned user is required")

        status = parse_enum(TaskStatus, data.status, "status") if data.status else None
        return {
            "title": title,
            "description": description,
            "assigned_to_user_id": assignee,
            "project_id": int(data.project_id) if data.project_id is not None else None,
            "estimated_hours": hours,
            "priority": parse_enum(TaskPriority, data.priority or TaskPriority.MEDIUM, "priority"),
            "due_date": data.due_date,
            "status": status,
        }

    # -------- Commands --------
    def create_task(self, actor: Actor, data: TaskInput) -> TaskView:
        self._require_manager(actor, "create tasks")
        fields = self._clean_input(data)
        requested = fields.pop("status") or TaskStatus.PENDING
        now = self._clock()

        with self._transactions.transaction():
            self._require_active_assignee(fields["assigned_to_user_id"])
            # task_id is assigned by the repository on insert.
            task = Task(
                task_id=0,
                created_by_user_id=actor.user_id,
                status=TaskStatus.PENDING,
                created_at=now,
                **fields,
            )
            change = plan_transition(task, requested, now=now, actor_id=actor.user_id)
            if change:
                task = change.apply(task)
            task = replace(task, task_id=self._tasks.add(task))

        logger.info("Task %s created by user %s with status %s", task.task_id, actor.user_id, task.status.value)
        self._notifier.enqueue(
            task.assigned_to_user_id,
            NotificationType.TASK_ASSIGNED,
            f"You have been assigned a new task: '{task.title}'",
        )
        return self._views.build(task)

    def update_task(self, actor: Actor, task_id: int, data: TaskInput) -> TaskView:
        self._require_manager(actor, "update tasks")
        fields = self._clean_input(data)
        requested = fields.pop("status")
        now = self._clock()

        with self._transactions.transaction():
            current = self._load(task_id)
            reassigned = fields["assigned_to_user_id"] != current.assigned_to_user_id
            if reassigned:
                self._require_active_assignee(fields["assigned_to_user_id"])

            task = replace(current, **fields)
            change = plan_transition(task, requested or task.status, now=now, actor_id=actor.user_id)
            if change:
                task = change.apply(task)
            self._save(task)

        logger.info("Task %s updated by user %s", task.task_id, actor.user_id)
        if reassigned:
            self._notifier.enqueue(
                task.assigned_to_user_id,
                NotificationType.TASK_ASSIGNED,
                f"You have been assigned a new task: '{task.title}'",
            )
        if change:
            self._notify_status_change(task)
        return self._views.build(task)

    def delete_task(self, actor: Actor, task_id: int) -> bool:
        self._require_manager(actor, "delete tasks")
        with self._transactions.transaction():
            task = self._load(task_id)
            require_deletable(task)
            if not self._tasks.delete_by_id(task.task_id):
                raise NotFoundError(f"Task with ID {task_id} not found")
        logger.info("Task %s deleted by user %s", task_id, actor.user_id)
        return True

    def update_task_status(self, task_id: int, status: str, actor: Optional[Actor] = None) -> bool:
        """Generic status change.

        Moving to Approved carries the same guards as ``approve_task``: a manager
        or admin actor and a task that is Completed (or already Approved).
        """
        requested = parse_enum(TaskStatus, status, "status")
        if requested == TaskStatus.APPROVED and (actor is None or not actor.is_manager):
            raise AuthorizationError("Only managers or admins can approve tasks")
        now = self._clock()

        with self._transactions.transaction():
            task = self._load(task_id)
            if requested == TaskStatus.APPROVED and task.status != TaskStatus.APPROVED:
                require_status(task, TaskStatus.COMPLETED, action="approve")
            previous = task.status
            change = plan_transition(task, requested, now=now, actor_id=actor.user_id if actor else None)
            if change:
                task = change.apply(task)
                self._save(task)

        if change:
            logger.info("Task %s status %s -> %s", task.task_id, previous.value, task.status.value)
            self._notify_status_change(task)
        return True

    def start_task(self, task_id: int, actor: Actor) -> TaskView:
        with self._transactions.transaction():
            task = self._load(task_id)
            self._require_assignee(task, actor, "start")
            require_status(task, TaskStatus.PENDING, action="start")
            task = plan_transition(task, TaskStatus.IN_PROGRESS, now=self._clock()).apply(task)
            self._save(task)

        logger.info("Task %s started by user %s", task.task_id, actor.user_id)
        self._notifier.enqueue(
            task.created_by_user_id,
            NotificationType.TASK_STARTED,
            f"Task '{task.title}' has been started by {self._views.user_name(task.assigned_to_user_id)}",
        )
        return self._views.build(task)

    def complete_task(self, task_id: int, actor: Actor) -> TaskView:
        with self._transactions.transaction():
            task = self._load(task_id)
            self._require_assignee(task, actor, "complete")
            require_status(task, TaskStatus.IN_PROGRESS, action="complete")
            task = plan_transition(task, TaskStatus.COMPLETED, now=self._clock()).apply(task)
            self._save(task)

        logger.info("Task %s completed by user %s, awaiting approval", task.task_id, actor.user_id)
        self._notifier.enqueue(
            task.created_by_user_id,
            NotificationType.TASK_PENDING_APPROVAL,
            f"Task '{task.title}' has been completed by {self._views.user_name(task.assigned_to_user_id)} "
            "and is awaiting your approval",
        )
        return self._views.build(task)

    def approve_task(self, task_id: int, actor: Actor) -> TaskView:
        self._require_manager(actor, "approve tasks")
        with self._transactions.transaction():
            task = self._load(task_id)
            require_status(task, TaskStatus.COMPLETED, action="approve")
            if task.is_approved:
                raise PreconditionError(
                    "Task is already approved",
                    current_status=task.status.value,
                    required_status=TaskStatus.COMPLETED.value,
                )
            task = plan_transition(task, TaskStatus.APPROVED, now=self._clock(), actor_id=actor.user_id).apply(task)
            self._save(task)

        logger.info("Task %s approved by user %s", task.task_id, actor.user_id)
        self._notifier.enqueue(
            task.assigned_to_user_id,
            NotificationType.TASK_APPROVED,
            f"Your task '{task.title}' has been approved!",
        )
        return self._views.build(task)

    def reject_task(self, task_id: int, actor: Actor, reason: str) -> TaskView:
        self._require_manager(actor, "reject tasks")
        reason = (reason or "").strip() or "No reason given"
        with self._transactions.transaction():
            task = self._load(task_id)
            require_status(task, TaskStatus.COMPLETED, action="reject")
            task = plan_transition(task, TaskStatus.IN_PROGRESS, now=self._clock()).apply(task)
            self._save(task)

        logger.info("Task %s rejected by user %s", task.task_id, actor.user_id)
        self._notifier.enqueue(
            task.assigned_to_user_id,
            NotificationType.TASK_REJECTED,
            f"Your task '{task.title}' was rejected. Reason: {reason}",
        )
        return self._views.build(task)

    def log_task_time(self, actor: Actor, data: TimeLogInput) -> bool:
        hours = parse_decimal(data.hours_spent, "Hours spent")
        require_range(hours, "Hours spent", low=MIN_HOURS_PER_ENTRY, high=MAX_HOURS_PER_ENTRY, low_inclusive=False)
        require_places(hours, "Hours spent", HOURS_DECIMAL_PLACES)
        if data.work_date is None:
            raise ValidationError("Date is required")
        description = optional_text(data.work_description, "Work description")
        require_max_length(description, "Work description", WORK_DESCRIPTION_MAX_LENGTH)
        now = self._clock()

        with self._transactions.transaction():
            task = self._load(data.task_id)
            self._require_assignee(task, actor, "log time for")
            self._tasks.add_time_entry(
                TimeLogEntry(
                    entry_id=0,
                    task_id=task.task_id,
                    user_id=actor.user_id,
                    work_date=data.work_date,
                    hours_spent=hours,
                    work_description=description,
                    created_at=now,
                )
            )
            if task.status == TaskStatus.PENDING:
                task = plan_transition(task, TaskStatus.IN_PROGRESS, now=now).apply(task)
                self._save(task)
                logger.info("Task %s auto-started by time log from user %s", task.task_id, actor.user_id)

        logger.info("User %s logged %s h on task %s", actor.user_id, hours, task.task_id)
        return True

    # -------- Queries --------
    def get_task(self, task_id: int) -> TaskView:
        return self._views.build(self._load(task_id))

    def get_user_tasks(self, user_id: int) -> List[TaskView]:
        return self._views.build_many(self._tasks.list_by_assignee(int(user_id)))

    def get_created_tasks(self, actor: Actor) -> List[TaskView]:
        self._require_manager(actor, "view created tasks")
        return self._views.build_many(self._tasks.list_by_creator(actor.user_id))

    def get_overdue_tasks(self, actor: Actor) -> List[TaskView]:
        self._require_manager(actor, "view overdue tasks")
        return self._views.build_many(self._tasks.list_overdue(now=self._clock()))

    def get_tasks_pending_approval(self, actor: Actor) -> List[TaskView]:
        self._require_manager(actor, "view tasks pending approval")
        tasks = [
            t
            for t in self._tasks.list_by_creator(actor.user_id)
            if t.status == TaskStatus.COMPLETED and not t.is_approved
        ]
        return self._views.build_many(tasks)

    def get_task_time_entries(self, task_id: int) -> Sequence[TimeLogEntry]:
        task = self._load(task_id)
        return self._tasks.list_time_entries(task.task_id)

    # -------- Notifications --------
    def _notify_status_change(self, task: Task) -> None:
        if task.status == TaskStatus.COMPLETED:
            self._notifier.enqueue(
                task.created_by_user_id,
                NotificationType.TASK_COMPLETED,
                f"Task '{task.title}' has been completed by {self._views.user_name(task.assigned_to_user_id)}",
            )
        elif task.status == TaskStatus.APPROVED:
            self._notifier.enqueue(
                task.assigned_to_user_id,
                NotificationType.TASK_APPROVED,
                f"Your task '{task.title}' has been approved!",
            )

