from __future__ import annotations

import math
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_positive(value: object, field_name: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be > 0")
    return number


def optional_positive(value: object, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_positive(value, field_name)


def round_hours(value: float) -> float:
    """Presentation rounding (2 decimals). Never applied between aggregation steps."""
    return round(float(value), 2)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def require_non_negative(value: object, field_name: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    if number < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return number
