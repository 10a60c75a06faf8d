"""Role -> identity adapter map plus the event source. Injected into the meeting services; register adapters here."""
import logging

from meetings.core.errors import NotFoundError, ValidationError
from meetings.services.directory.base import EventSource, IdentityAdapter
from meetings.services.directory.types import ActorIdentity, ActorRef, EventBounds

logger = logging.getLogger(__name__)


class Directory:
    """Resolves ActorRef and event ids through whatever adapters the caller registered."""

    def __init__(self, events: EventSource, adapters: dict[str, IdentityAdapter] | None = None) -> None:
        self._events = events
        self._adapters: dict[str, IdentityAdapter] = {}
        for role, adapter in (adapters or {}).items():
            self.register(role, adapter)

    def register(self, role: str, adapter: IdentityAdapter) -> None:
        """Register the adapter for a role (e.g. 'attendee', 'exhibitor')."""
        self._adapters[role] = adapter
        logger.info("Registered identity adapter: %s", role)

    def get_adapter(self, role: str) -> IdentityAdapter:
        if role not in self._adapters:
            raise ValidationError(f"Unknown role: {role}", available=list(self._adapters.keys()))
        return self._adapters[role]

    def list_roles(self) -> list[str]:
        return list(self._adapters.keys())

    def resolve(self, actor: ActorRef) -> ActorIdentity:
        """Normalized identity for actor. Raises NotFoundError if the adapter has no such id."""
        identity = self.get_adapter(actor.role).get_identity(actor.id)
        if identity is None:
            raise NotFoundError(f"{actor.role.capitalize()} not found", actor_id=actor.id, role=actor.role)
        return identity

    def event_bounds(self, event_id: str) -> EventBounds:
        bounds = self._events.get_event(event_id)
        if bounds is None:
            raise NotFoundError("Event not found", event_id=event_id)
        return bounds
