from __future__ import annotations

from typing import Sequence

from ..core.enums import NotificationStatus, NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, user_id: int, notification_type: NotificationType, message: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, notification_type, message, status)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), notification_type.value, message, NotificationStatus.UNREAD.value),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int, *, limit: int = 50) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT notification_id, user_id, notification_type, message, status, created_at
                FROM notifications
                WHERE user_id=%s
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [
                Notification(
                    notification_id=int(r["notification_id"]),
                    user_id=int(r["user_id"]),
                    notification_type=NotificationType(r["notification_type"]),
                    message=r["message"],
                    status=NotificationStatus(r["status"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
