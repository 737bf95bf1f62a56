"""Example: drive the task lifecycle through the service layer (no Flask).

Walks one task through create -> start -> complete -> approve using the demo
users created by `scripts/init_db.py --seed` (1 = admin, 2 = manager, 3 = employee).
"""

import importlib
from decimal import Decimal

from config import get_settings_module

from src.timetrack.timetrack.container import build_container
from src.timetrack.timetrack.core.enums import Role
from src.timetrack.timetrack.tasks.model import TaskInput
from src.timetrack.timetrack.users.model import Actor


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    tasks = container.task_service

    manager = Actor(user_id=2, role=Role.MANAGER)
    employee = Actor(user_id=3, role=Role.EMPLOYEE)

    view = tasks.create_task(
        manager,
        TaskInput(title="Write onboarding guide", assigned_to_user_id=employee.user_id, estimated_hours=Decimal("5")),
    )
    print(view.display_task_id, view.status.value)

    tasks.start_task(view.task_id, employee)
    tasks.complete_task(view.task_id, employee)
    view = tasks.approve_task(view.task_id, manager)
    print(view.display_task_id, view.status.value, view.approved_by_user_name)


if __name__ == "__main__":
    main()
