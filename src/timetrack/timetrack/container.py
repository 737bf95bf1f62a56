from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_DISPLAY_PREFIX
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .projects.mysql_project_repository import MySQLProjectRepository
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .tasks.views import TaskViewBuilder
from .users.mysql_user_repository import MySQLUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    projects_repo: MySQLProjectRepository
    tasks_repo: MySQLTaskRepository
    notifications_repo: MySQLNotificationRepository

    notification_service: NotificationService
    task_service: TaskService


def build_container(*, db_config: dict, display_prefix: str = DEFAULT_DISPLAY_PREFIX) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    users_repo = MySQLUserRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    tasks_repo = MySQLTaskRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    notification_service = NotificationService(notifications_repo)
    task_service = TaskService(
        tasks_repo,
        users_repo,
        notification_service,
        conn,
        views=TaskViewBuilder(tasks_repo, users_repo, projects_repo, display_prefix=display_prefix),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        notifications_repo=notifications_repo,
        notification_service=notification_service,
        task_service=task_service,
    )
