from __future__ import annotations

from enum import Enum
from typing import TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_int(value, field_name: str, *, minimum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return number


def require_enum(enum_cls: type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
