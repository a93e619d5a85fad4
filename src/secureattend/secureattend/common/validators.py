from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_hours(value, field_name: str) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be a number") from e
    if hours <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return hours


def require_non_negative_minutes(value, field_name: str) -> int:
    try:
        minutes = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be an integer") from e
    if minutes < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return minutes


def require_non_negative_hours(value, field_name: str) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field_name} must be a number") from e
    if hours < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return hours
