from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import NotificationStatus, NotificationType


@dataclass(frozen=True)
class Notification:
    """Domain entity: a user-facing alert produced by a task transition."""

    notification_id: int
    user_id: int
    notification_type: NotificationType
    message: str
    status: NotificationStatus
    created_at: datetime
