"""Protocols for directory adapters. Each role's profile schema differs; adapters return the same normalized shape."""
from typing import Protocol

from meetings.services.directory.types import ActorIdentity, EventBounds


class IdentityAdapter(Protocol):
    """One per role (attendee, exhibitor, speaker). Only the lookup differs."""

    def get_identity(self, actor_id: str) -> ActorIdentity | None:
        """Normalized identity, or None when the id is unknown for this role."""
        ...


class EventSource(Protocol):
    def get_event(self, event_id: str) -> EventBounds | None:
        """Event start/end instants, or None when the id is unknown."""
        ...
