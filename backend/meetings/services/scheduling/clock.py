"""
Slot clock: turn any timestamp a client sends into the canonical 30-minute UTC slot key.

Accepted input:
- an instant with an explicit offset or trailing Z ("2025-11-04T09:07:00+02:00", "2025-11-04T09:07Z")
- a wall-clock string without offset ("2025-11-04T09:07", "2025-11-04 09:07:31.250"), read as UTC
- a datetime (aware is converted to UTC; naive is read as UTC wall time) or a date (midnight UTC)

Nothing is ever shifted by the server's local timezone.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Union

from meetings.core.constants import SLOT_MINUTES
from meetings.core.errors import ValidationError

SLOT_KEY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

TimestampInput = Union[str, datetime, date]


def normalize_to_utc(value: TimestampInput) -> datetime:
    """Parse value into an aware UTC datetime without rounding."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValidationError("Unsupported timestamp type", value_type=type(value).__name__)

    s = value.strip()
    if not s:
        raise ValidationError("Timestamp is required")
    if s[-1] in "zZ":
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"Invalid timestamp {value!r}. Use ISO 8601, e.g. 2025-11-04T09:00:00Z.")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def floor_to_slot(dt: datetime) -> datetime:
    """Snap to :00 or :30 of the same hour; seconds and microseconds dropped."""
    minute = 0 if dt.minute < SLOT_MINUTES else SLOT_MINUTES
    return dt.replace(minute=minute, second=0, microsecond=0)


def slot_start(value: TimestampInput) -> datetime:
    return floor_to_slot(normalize_to_utc(value))


def format_slot_key(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime(SLOT_KEY_FORMAT)


def slot_key(value: TimestampInput) -> str:
    """Canonical slot key, e.g. '2025-11-04T09:00:00Z'. Idempotent: slot_key(slot_key(x)) == slot_key(x)."""
    return format_slot_key(slot_start(value))


def parse_slot_key(key: str) -> datetime:
    """Slot key back to an aware UTC datetime."""
    return datetime.strptime(key, SLOT_KEY_FORMAT).replace(tzinfo=timezone.utc)


def slot_end(key: str) -> datetime:
    return parse_slot_key(key) + timedelta(minutes=SLOT_MINUTES)


def utc_day(value: TimestampInput) -> date:
    """UTC calendar day of a timestamp (strings like '2025-11-04' are accepted too)."""
    return normalize_to_utc(value).date()
