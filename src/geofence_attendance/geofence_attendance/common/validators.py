from __future__ import annotations

import math
from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_coordinate(value: Any, field_name: str, *, limit: float) -> float:
    """Parse a latitude/longitude and check it lies in [-limit, limit]."""
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if math.isnan(number) or not -limit <= number <= limit:
        raise ValidationError(f"{field_name} is out of range")
    return number


def require_latitude(value: Any) -> float:
    return require_coordinate(value, "latitude", limit=90.0)


def require_longitude(value: Any) -> float:
    return require_coordinate(value, "longitude", limit=180.0)
