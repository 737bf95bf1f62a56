from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced task or user does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PreconditionError(DomainError):
    """Raised when the current state does not allow the requested transition.

    ``current_status`` and ``required_status`` are kept so callers can render
    a precise message without parsing the text.
    """

    def __init__(
        self,
        message: str,
        *,
        current_status: Optional[str] = None,
        required_status: Optional[str] = None,
    ):
        super().__init__(message)
        self.current_status = current_status
        self.required_status = required_status
