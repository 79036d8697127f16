from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..core.constants import TOTAL_HOURS_PRECISION
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]

_MICROS_PER_HOUR = Decimal(3_600_000_000)


def _fromisoformat(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def now_utc() -> datetime:
    """Current UTC time as a naive datetime, the reference clock times are stored in.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_calendar_date(value: DateLike, field_name: str = "date") -> date:
    """Normalize a date, datetime or ISO string to a calendar date.

    The whole string must be an ISO date or timestamp. The date part is taken
    as written: '2026-03-01T23:30:00-05:00' is 2026-03-01, never shifted
    into another zone.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return _fromisoformat(text).date()
        except ValueError:
            raise ValidationError(f"Invalid {field_name}. Expected YYYY-MM-DD")
    raise ValidationError(f"Invalid {field_name}. Expected YYYY-MM-DD")


def optional_calendar_date(value: Optional[DateLike], field_name: str = "date") -> Optional[date]:
    if value is None or value == "":
        return None
    return to_calendar_date(value, field_name)


def parse_timestamp(value: Union[datetime, str], field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive datetime.

    Clock times are stored as naive UTC, matching now_utc(). Aware values are
    converted to UTC before the tzinfo is dropped; naive values are taken
    as UTC already.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = _fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid {field_name}. Expected an ISO-8601 timestamp")
    else:
        raise ValidationError(f"Invalid {field_name}. Expected an ISO-8601 timestamp")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def hours_between(start: datetime, end: datetime) -> float:
    """Hours from start to end, rounded half-up to two decimals.

    Works on integer microseconds so the result does not depend on float
    rounding of the intermediate value. Negative spans are kept negative.
    """
    micros = (end - start) // timedelta(microseconds=1)
    hours = Decimal(micros) / _MICROS_PER_HOUR
    quantum = Decimal(1).scaleb(-TOTAL_HOURS_PRECISION)
    return float(hours.quantize(quantum, rounding=ROUND_HALF_UP))


def isoformat_or_none(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None
