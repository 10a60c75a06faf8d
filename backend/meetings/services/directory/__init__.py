"""
Directory: who the participants are and when the event runs.
Each role's profile schema is fetched its own way but normalized to the same ActorIdentity shape,
so the meeting engine stays schema-agnostic.
"""
from meetings.services.directory.base import EventSource, IdentityAdapter
from meetings.services.directory.registry import Directory
from meetings.services.directory.types import ActorIdentity, ActorRef, EventBounds

__all__ = [
    "ActorIdentity",
    "ActorRef",
    "Directory",
    "EventBounds",
    "EventSource",
    "IdentityAdapter",
]
