from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks."""

    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    ADMIN = "Admin"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class TaskStatus(str, Enum):
    """The single authoritative set of task statuses."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    APPROVED = "Approved"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class NotificationType(str, Enum):
    """Kinds of user-facing alerts emitted by task transitions."""

    TASK_ASSIGNED = "TaskAssigned"
    TASK_STARTED = "TaskStarted"
    TASK_PENDING_APPROVAL = "TaskPendingApproval"
    TASK_COMPLETED = "TaskCompleted"
    TASK_APPROVED = "TaskApproved"
    TASK_REJECTED = "TaskRejected"


class NotificationStatus(str, Enum):
    UNREAD = "Unread"
    READ = "Read"
