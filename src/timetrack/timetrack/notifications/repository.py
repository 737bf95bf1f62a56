from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import NotificationType
from .model import Notification


class NotificationRepository(Protocol):
    def add(self, *, user_id: int, notification_type: NotificationType, message: str) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError
