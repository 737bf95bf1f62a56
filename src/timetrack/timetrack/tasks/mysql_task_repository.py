from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Task, TimeLogEntry
from .repository import TaskRepository

_TASK_COLUMNS = """
    task_id, title, description, assigned_to_user_id, created_by_user_id, project_id,
    estimated_hours, status, priority, due_date, created_at, started_at, completed_at,
    is_approved, approved_at, approved_by_user_id
"""


def _row_to_task(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row.get("description"),
        assigned_to_user_id=int(row["assigned_to_user_id"]),
        created_by_user_id=int(row["created_by_user_id"]),
        project_id=row.get("project_id"),
        estimated_hours=to_decimal(row["estimated_hours"]),
        status=TaskStatus(row["status"]),
        priority=TaskPriority(row.get("priority") or TaskPriority.MEDIUM.value),
        due_date=row.get("due_date"),
        created_at=row["created_at"],
        started_at=row.get("started_at"),
        completed_at=row.get("completed_at"),
        is_approved=bool(row.get("is_approved", False)),
        approved_at=row.get("approved_at"),
        approved_by_user_id=row.get("approved_by_user_id"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Tasks --------
    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            row = fetchone(cur)
            return _row_to_task(row) if row else None

    def list_by_assignee(self, user_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks
                WHERE assigned_to_user_id=%s
                ORDER BY due_date IS NULL, due_date ASC, created_at DESC
                """,
                (int(user_id),),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def list_by_creator(self, creator_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks
                WHERE created_by_user_id=%s
                ORDER BY created_at DESC
                """,
                (int(creator_id),),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def list_overdue(self, *, now: datetime) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks
                WHERE due_date IS NOT NULL AND due_date < %s AND status <> %s
                ORDER BY due_date ASC
                """,
                (now, TaskStatus.COMPLETED.value),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def add(self, task: Task) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(
                    title, description, assigned_to_user_id, created_by_user_id, project_id,
                    estimated_hours, status, priority, due_date, created_at, started_at,
                    completed_at, is_approved, approved_at, approved_by_user_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task.title,
                    task.description,
                    int(task.assigned_to_user_id),
                    int(task.created_by_user_id),
                    task.project_id,
                    task.estimated_hours,
                    task.status.value,
                    task.priority.value,
                    task.due_date,
                    task.created_at,
                    task.started_at,
                    task.completed_at,
                    1 if task.is_approved else 0,
                    task.approved_at,
                    task.approved_by_user_id,
                ),
            )
            return int(cur.lastrowid)

    def update(self, task: Task) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, assigned_to_user_id=%s, project_id=%s,
                    estimated_hours=%s, status=%s, priority=%s, due_date=%s,
                    started_at=%s, completed_at=%s, is_approved=%s, approved_at=%s,
                    approved_by_user_id=%s
                WHERE task_id=%s
                """,
                (
                    task.title,
                    task.description,
                    int(task.assigned_to_user_id),
                    task.project_id,
                    task.estimated_hours,
                    task.status.value,
                    task.priority.value,
                    task.due_date,
                    task.started_at,
                    task.completed_at,
                    1 if task.is_approved else 0,
                    task.approved_at,
                    task.approved_by_user_id,
                    int(task.task_id),
                ),
            )
            # MySQL reports 0 affected rows when nothing changed, so re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM tasks WHERE task_id=%s", (int(task.task_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0

    # -------- Time log --------
    def add_time_entry(self, entry: TimeLogEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_times(task_id, user_id, work_date, hours_spent, work_description, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(entry.task_id),
                    int(entry.user_id),
                    entry.work_date,
                    entry.hours_spent,
                    entry.work_description,
                    entry.created_at,
                ),
            )
            return int(cur.lastrowid)

    def sum_hours(self, task_id: int) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT SUM(hours_spent) AS total FROM task_times WHERE task_id=%s",
                (int(task_id),),
            )
            row = fetchone(cur)
            return to_decimal(row["total"] if row else None)

    def list_time_entries(self, task_id: int) -> Sequence[TimeLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT task_time_id, task_id, user_id, work_date, hours_spent, work_description, created_at
                FROM task_times
                WHERE task_id=%s
                ORDER BY work_date DESC, task_time_id DESC
                """,
                (int(task_id),),
            )
            return [
                TimeLogEntry(
                    entry_id=int(r["task_time_id"]),
                    task_id=int(r["task_id"]),
                    user_id=int(r["user_id"]),
                    work_date=r["work_date"],
                    hours_spent=to_decimal(r["hours_spent"]),
                    work_description=r.get("work_description"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
