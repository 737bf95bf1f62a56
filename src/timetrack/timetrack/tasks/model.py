from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: a unit of assigned work.

    Timestamps and the approval flag are derived from status transitions
    (see ``tasks.lifecycle``) and are never edited directly.
    """

    task_id: int
    title: str
    description: Optional[str]
    assigned_to_user_id: int
    created_by_user_id: int
    estimated_hours: Decimal
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    project_id: Optional[int] = None
    due_date: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_approved: bool = False
    approved_at: Optional[datetime] = None
    approved_by_user_id: Optional[int] = None


@dataclass(frozen=True)
class TimeLogEntry:
    entry_id: int
    task_id: int
    user_id: int
    work_date: date
    hours_spent: Decimal
    work_description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TaskInput:
    """Raw create/update payload; validated by ``TaskService``."""

    title: str
    assigned_to_user_id: int
    estimated_hours: Union[Decimal, str, int, float]
    description: Optional[str] = None
    project_id: Optional[int] = None
    priority: Union[TaskPriority, str] = TaskPriority.MEDIUM
    status: Union[TaskStatus, str, None] = None
    due_date: Optional[datetime] = None


@dataclass(frozen=True)
class TimeLogInput:
    task_id: int
    work_date: date
    hours_spent: Union[Decimal, str, int, float]
    work_description: Optional[str] = None
