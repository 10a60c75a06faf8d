"""Calendar data for an accepted meeting. An external ICS generator turns this into file bytes."""
from datetime import timedelta
from typing import Any

from meetings.core.constants import MEETING_DURATION_MINUTES
from meetings.models.meet_request import MeetRequest
from meetings.services.directory.types import ActorIdentity, EventBounds
from meetings.services.scheduling.clock import parse_slot_key


def calendar_data(
    meet: MeetRequest,
    sender: ActorIdentity,
    receiver: ActorIdentity,
    event: EventBounds,
) -> dict[str, Any]:
    start = parse_slot_key(meet.requested_at)
    return {
        "uid": f"meeting-{meet.id}",
        "calendar_name": f"Meeting @ {event.title}" if event.title else "Meeting",
        "subject": meet.subject,
        "description": f"B2B Meeting - {meet.subject}",
        "start": start.isoformat(),
        "end": (start + timedelta(minutes=MEETING_DURATION_MINUTES)).isoformat(),
        "duration_minutes": MEETING_DURATION_MINUTES,
        "participant_names": [sender.display_name, receiver.display_name],
        "location": f"{event.title} venue" if event.title else "",
        "status": "CONFIRMED",
    }
