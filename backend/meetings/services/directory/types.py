"""Normalized types for all identity adapters. Same shape regardless of attendee/exhibitor/speaker schema."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from meetings.core.errors import ValidationError
from meetings.services.scheduling.clock import utc_day


@dataclass(frozen=True)
class ActorRef:
    """A participant: ids are only unique within a role, so the role travels with the id."""

    id: str
    role: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "role": self.role}


@dataclass(frozen=True)
class ActorIdentity:
    email: str
    display_name: str
    open_to_meetings: bool = False
    available_days: tuple[date, ...] = field(default_factory=tuple)

    def is_available_on(self, day: date) -> bool:
        """Empty allow-list means every event day is fine."""
        return not self.available_days or day in self.available_days


@dataclass(frozen=True)
class EventBounds:
    event_id: str
    start: datetime
    end: datetime
    title: str = ""


def parse_available_days(values: Any) -> tuple[date, ...]:
    """Accept 'YYYY-MM-DD', full ISO timestamps or date objects; skip anything unparseable."""
    out: list[date] = []
    for v in values or []:
        try:
            out.append(utc_day(v))
        except ValidationError:
            continue
    return tuple(out)
