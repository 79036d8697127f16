from __future__ import annotations

from typing import Any, Iterable, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> Any:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, str):
        if not value.strip():
            raise ValidationError(f"{field_name} is required")
        return value.strip()
    return value


def require_one_of(value: str, allowed: Iterable[str], message: str) -> str:
    if value not in set(allowed):
        raise ValidationError(message)
    return value


def parse_positive_int(value: Any, field_name: str) -> int:
    """Parse request ids from ints or digit strings.

    Booleans, fractional numbers and non-positive numbers are rejected.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValidationError(f"Invalid {field_name}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field_name}")
    return parsed


def optional_positive_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return parse_positive_int(value, field_name)
