from __future__ import annotations

from typing import Optional

from ..core.exceptions import InvalidInputError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise InvalidInputError(f"{field_name} must not be empty")
    return value.strip()


def require_in_range(value: int, field_name: str, low: int, high: int) -> int:
    if value is None or value < low or value > high:
        raise InvalidInputError(f"{field_name} must be between {low} and {high}")
    return value


def require_positive_id(value: Optional[int], field_name: str) -> int:
    if not value or int(value) <= 0:
        raise InvalidInputError(f"{field_name} is required")
    return int(value)
