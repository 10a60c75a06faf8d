"""In-process directory: identities and events held in dicts. Used for local runs and tests."""
from meetings.services.directory.registry import Directory
from meetings.services.directory.types import ActorIdentity, EventBounds


class StaticIdentityAdapter:
    def __init__(self, identities: dict[str, ActorIdentity] | None = None) -> None:
        self._identities: dict[str, ActorIdentity] = dict(identities or {})

    def add(self, actor_id: str, identity: ActorIdentity) -> None:
        self._identities[actor_id] = identity

    def get_identity(self, actor_id: str) -> ActorIdentity | None:
        return self._identities.get(actor_id)


class StaticEventSource:
    def __init__(self, events: list[EventBounds] | None = None) -> None:
        self._events = {e.event_id: e for e in events or []}

    def add(self, event: EventBounds) -> None:
        self._events[event.event_id] = event

    def get_event(self, event_id: str) -> EventBounds | None:
        return self._events.get(event_id)


def build_static_directory(roles: tuple[str, ...], events: list[EventBounds] | None = None) -> Directory:
    """Empty adapter per role; fill with directory.get_adapter(role).add(...)."""
    return Directory(StaticEventSource(events), {role: StaticIdentityAdapter() for role in roles})
