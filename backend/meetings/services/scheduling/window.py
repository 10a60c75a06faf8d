"""
Daily meeting window for an event day.

The window reuses the time-of-day of the event's start and end instants on the requested UTC day.
Events whose bounds give no usable window (inverted, zero-width, or midnight to midnight) fall back
to FALLBACK_WINDOW_START..FALLBACK_WINDOW_END UTC.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from meetings.core.constants import FALLBACK_WINDOW_END, FALLBACK_WINDOW_START, SLOT_MINUTES
from meetings.core.errors import ValidationError
from meetings.services.scheduling.clock import (
    TimestampInput,
    format_slot_key,
    normalize_to_utc,
    parse_slot_key,
)


@dataclass(frozen=True)
class DailyWindow:
    day: date
    start: datetime
    end: datetime
    is_fallback: bool = False

    @property
    def start_key(self) -> str:
        return format_slot_key(self.start)

    @property
    def end_key(self) -> str:
        return format_slot_key(self.end)

    def contains(self, slot: datetime) -> bool:
        """Half-open: a slot starting exactly at the window end is outside."""
        return self.start <= slot < self.end

    def slot_keys(self) -> Iterator[str]:
        step = timedelta(minutes=SLOT_MINUTES)
        t = self.start
        while t < self.end:
            yield format_slot_key(t)
            t += step


def _is_unusable(sh: int, sm: int, eh: int, em: int) -> bool:
    if (eh, em) <= (sh, sm):
        return True
    return sh == 0 and sm == 0 and eh == 0 and em == 0


def event_day_range(event_start: TimestampInput, event_end: TimestampInput) -> tuple[date, date]:
    """Inclusive range of UTC calendar days the event touches."""
    return normalize_to_utc(event_start).date(), normalize_to_utc(event_end).date()


def daily_window(event_start: TimestampInput, event_end: TimestampInput, day: date) -> DailyWindow:
    evs = normalize_to_utc(event_start)
    eve = normalize_to_utc(event_end)
    sh, sm, eh, em = evs.hour, evs.minute, eve.hour, eve.minute
    fallback = _is_unusable(sh, sm, eh, em)
    if fallback:
        (sh, sm), (eh, em) = FALLBACK_WINDOW_START, FALLBACK_WINDOW_END
    start = datetime(day.year, day.month, day.day, sh, sm, tzinfo=timezone.utc)
    end = datetime(day.year, day.month, day.day, eh, em, tzinfo=timezone.utc)
    return DailyWindow(day=day, start=start, end=end, is_fallback=fallback)


def ensure_day_in_event(event_start: TimestampInput, event_end: TimestampInput, day: date) -> None:
    first, last = event_day_range(event_start, event_end)
    if day < first or day > last:
        raise ValidationError(
            "Date outside event",
            day=day.isoformat(),
            event_first_day=first.isoformat(),
            event_last_day=last.isoformat(),
        )


def window_for_slot(event_start: TimestampInput, event_end: TimestampInput, slot_iso: str) -> DailyWindow:
    """Validate a slot key against the event days and that day's window; returns the window."""
    slot = parse_slot_key(slot_iso)
    ensure_day_in_event(event_start, event_end, slot.date())
    window = daily_window(event_start, event_end, slot.date())
    if not window.contains(slot):
        raise ValidationError(
            "Requested time outside daily window",
            slot=slot_iso,
            window_start=window.start_key,
            window_end=window.end_key,
        )
    return window
