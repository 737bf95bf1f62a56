from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from .model import Task, TimeLogEntry


class TaskRepository(Protocol):
    """Persistence gateway for tasks and their time-log entries."""

    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_by_assignee(self, user_id: int) -> Sequence[Task]:
        """Due date ascending (undated last), then newest first."""

        raise NotImplementedError

    def list_by_creator(self, creator_id: int) -> Sequence[Task]:
        """Newest first."""

        raise NotImplementedError

    def list_overdue(self, *, now: datetime) -> Sequence[Task]:
        """Tasks due before ``now`` and not Completed, due date ascending."""

        raise NotImplementedError

    def add(self, task: Task) -> int:
        raise NotImplementedError

    def update(self, task: Task) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

    # Time log
    def add_time_entry(self, entry: TimeLogEntry) -> int:
        raise NotImplementedError

    def sum_hours(self, task_id: int) -> Decimal:
        raise NotImplementedError

    def list_time_entries(self, task_id: int) -> Sequence[TimeLogEntry]:
        raise NotImplementedError


class TransactionManager(Protocol):
    """Unit of work: everything inside ``transaction()`` commits or rolls back together."""

    def transaction(self) -> AbstractContextManager[Any]:
        raise NotImplementedError
