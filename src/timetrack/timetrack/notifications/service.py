from __future__ import annotations

import logging
from typing import Sequence

from ..core.enums import NotificationType
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Fire-and-forget notification sink.

    ``enqueue`` never raises: a failed write is logged and reported as ``False``
    so the task transition that triggered it stays committed.
    """

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def enqueue(self, user_id: int, notification_type: NotificationType, message: str) -> bool:
        try:
            self._notifications.add(user_id=int(user_id), notification_type=notification_type, message=message)
        except Exception:
            logger.warning(
                "Dropped %s notification for user %s",
                notification_type.value,
                user_id,
                exc_info=True,
            )
            return False
        logger.debug("Queued %s notification for user %s", notification_type.value, user_id)
        return True

    def list_for_user(self, user_id: int, *, limit: int = 50) -> Sequence[Notification]:
        return self._notifications.list_for_user(int(user_id), limit=limit)
