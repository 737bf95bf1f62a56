from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def parse_decimal(value, field_name: str) -> Decimal:
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return result


def require_range(value: Decimal, field_name: str, *, low: Decimal, high: Decimal, low_inclusive: bool = True) -> Decimal:
    too_low = value < low if low_inclusive else value <= low
    if too_low or value > high:
        bracket = "[" if low_inclusive else "("
        raise ValidationError(f"{field_name} must be within {bracket}{low}, {high}]")
    return value


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    """Map a raw value onto ``enum_cls``, listing the valid values on failure."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}'. Valid values: {valid}")


def require_places(value: Decimal, field_name: str, places: int) -> Decimal:
    """Reject values the DECIMAL(p, places) column would silently round."""
    if value != value.quantize(Decimal(1).scaleb(-places)):
        raise ValidationError(f"{field_name} must have at most {places} decimal places")
    return value


def optional_text(value, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip() or None
