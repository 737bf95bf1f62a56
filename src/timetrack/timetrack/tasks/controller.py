from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, PreconditionError, ValidationError
from ..container import Container
from ..users.model import Actor
from .model import TaskInput, TimeLogInput

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PreconditionError, 409),
)


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


def _ok(data: Any = None, message: str = "", status: int = 200):
    return jsonify({"success": True, "message": message, "data": _to_json(data)}), status


def _fail(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return jsonify(body), status


def register(app: Flask, container: Container) -> None:
    """Task routes under /api/tasks.

    The caller identity comes from the X-User-Id / X-User-Role headers set by
    the upstream auth gateway; this layer does no token handling.
    """

    service = container.task_service

    def actor_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                user_id = int(request.headers.get("X-User-Id", ""))
                role = Role(request.headers.get("X-User-Role", ""))
            except ValueError:
                return _fail("Missing or invalid caller identity", 401)
            g.actor = Actor(user_id=user_id, role=role)
            return view(*args, **kwargs)

        return wrapper

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(e, error_type):
                break
        else:
            status = 400
        logger.info("%s: %s", type(e).__name__, e)
        return _fail(
            str(e),
            status,
            current_status=getattr(e, "current_status", None),
            required_status=getattr(e, "required_status", None),
        )

    def _payload() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _task_input(data: dict) -> TaskInput:
        try:
            assignee = int(data.get("assignedToUserId"))
        except (TypeError, ValueError):
            raise ValidationError("assignedToUserId is required")
        project_id = data.get("projectId")
        try:
            project_id = int(project_id) if project_id not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("projectId must be an integer")
        return TaskInput(
            title=data.get("title") or "",
            description=data.get("description"),
            assigned_to_user_id=assignee,
            project_id=project_id,
            estimated_hours=data.get("estimatedHours"),
            priority=data.get("priority") or "Medium",
            status=data.get("status"),
            due_date=parse_iso_datetime(data.get("dueDate")),
        )

    @app.post("/api/tasks", endpoint="create_task")
    @actor_required
    def create_task():
        view = service.create_task(g.actor, _task_input(_payload()))
        return _ok(asdict(view), "Task created and assigned successfully", 201)

    @app.put("/api/tasks/<int:task_id>", endpoint="update_task")
    @actor_required
    def update_task(task_id: int):
        view = service.update_task(g.actor, task_id, _task_input(_payload()))
        return _ok(asdict(view), "Task updated successfully")

    @app.delete("/api/tasks/<int:task_id>", endpoint="delete_task")
    @actor_required
    def delete_task(task_id: int):
        service.delete_task(g.actor, task_id)
        return "", 204

    @app.get("/api/tasks/<int:task_id>", endpoint="get_task")
    @actor_required
    def get_task(task_id: int):
        return _ok(asdict(service.get_task(task_id)))

    @app.get("/api/tasks/my-tasks", endpoint="my_tasks")
    @actor_required
    def my_tasks():
        return _ok([asdict(v) for v in service.get_user_tasks(g.actor.user_id)])

    @app.get("/api/tasks/created-by-me", endpoint="created_tasks")
    @actor_required
    def created_tasks():
        return _ok([asdict(v) for v in service.get_created_tasks(g.actor)])

    @app.get("/api/tasks/overdue", endpoint="overdue_tasks")
    @actor_required
    def overdue_tasks():
        return _ok([asdict(v) for v in service.get_overdue_tasks(g.actor)])

    @app.get("/api/tasks/pending-approval", endpoint="pending_approval_tasks")
    @actor_required
    def pending_approval_tasks():
        return _ok([asdict(v) for v in service.get_tasks_pending_approval(g.actor)])

    @app.patch("/api/tasks/<int:task_id>/status", endpoint="update_task_status")
    @actor_required
    def update_task_status(task_id: int):
        status = str(_payload().get("status") or "")
        result = service.update_task_status(task_id, status, actor=g.actor)
        return _ok(result, f"Task status updated to {status}")

    @app.post("/api/tasks/<int:task_id>/start", endpoint="start_task")
    @actor_required
    def start_task(task_id: int):
        return _ok(asdict(service.start_task(task_id, g.actor)), "Task started")

    @app.post("/api/tasks/<int:task_id>/complete", endpoint="complete_task")
    @actor_required
    def complete_task(task_id: int):
        return _ok(asdict(service.complete_task(task_id, g.actor)), "Task completed and sent for approval")

    @app.post("/api/tasks/<int:task_id>/approve", endpoint="approve_task")
    @actor_required
    def approve_task(task_id: int):
        return _ok(asdict(service.approve_task(task_id, g.actor)), "Task approved")

    @app.post("/api/tasks/<int:task_id>/reject", endpoint="reject_task")
    @actor_required
    def reject_task(task_id: int):
        reason = str(_payload().get("reason") or "")
        return _ok(asdict(service.reject_task(task_id, g.actor, reason)), "Task rejected")

    @app.post("/api/tasks/log-time", endpoint="log_task_time")
    @actor_required
    def log_task_time():
        data = _payload()
        try:
            task_id = int(data.get("taskId"))
        except (TypeError, ValueError):
            raise ValidationError("taskId is required")
        entry = TimeLogInput(
            task_id=task_id,
            work_date=parse_iso_date(str(data.get("date") or "")[:10]),
            hours_spent=data.get("hoursSpent"),
            work_description=data.get("workDescription"),
        )
        return _ok(service.log_task_time(g.actor, entry), "Task time logged successfully")

    @app.get("/api/tasks/<int:task_id>/time-entries", endpoint="task_time_entries")
    @actor_required
    def task_time_entries(task_id: int):
        return _ok([asdict(e) for e in service.get_task_time_entries(task_id)])

    @app.get("/api/notifications", endpoint="my_notifications")
    @actor_required
    def my_notifications():
        limit = request.args.get("limit", default=50, type=int)
        return _ok([asdict(n) for n in container.notification_service.list_for_user(g.actor.user_id, limit=limit)])
