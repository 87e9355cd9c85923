from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return value.strip()


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} không hợp lệ")
    if number <= 0:
        raise ValidationError(f"{field_name} không hợp lệ")
    return number


def unique_ids(values: Iterable, field_name: str) -> tuple[int, ...]:
    """Validate ids and drop duplicates, keeping first occurrence order."""
    seen: dict[int, None] = {}
    for v in values:
        seen.setdefault(require_positive_int(v, field_name), None)
    return tuple(seen)
