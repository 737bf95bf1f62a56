from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; the task engine only reads users (names, role, status).
    """

    user_id: int
    name: str
    email: str
    role: Role
    department: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE
    manager_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


@dataclass(frozen=True)
class Actor:
    """Identity and role of the caller issuing a task command."""

    user_id: int
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role in (Role.MANAGER, Role.ADMIN)
