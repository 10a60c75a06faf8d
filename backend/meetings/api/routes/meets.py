"""
Meeting requests API: create, accept / propose / confirm / decline / cancel, listings and calendar data.

Caller identified by X-Actor-Id / X-Actor-Role headers. Domain errors are mapped to HTTP codes by the
MeetingError handler in main.py (400 validation, 404 not found, 409 state or slot conflict).
"""
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from meetings.api.deps import get_actor, get_meeting_deps
from meetings.core.constants import ROLE_ADMIN
from meetings.core.errors import StateConflictError
from meetings.db.session import get_db
from meetings.services import meet_service
from meetings.services.deps import MeetingDeps
from meetings.services.directory.types import ActorRef
from meetings.services.reminder_service import list_reminders

router = APIRouter()
logger = logging.getLogger(__name__)


def _meet_response(meet) -> dict[str, Any]:
    return {"success": True, "data": meet_service.meet_to_dict(meet)}


# --- Create ---


class CreateMeetRequest(BaseModel):
    event_id: str = Field(..., description="Event the meeting belongs to")
    receiver_id: str
    receiver_role: str = Field(..., description="attendee | exhibitor | speaker")
    date_time: str | datetime = Field(..., description="ISO 8601; floored to the 30-minute UTC slot")
    subject: str = Field(..., max_length=255)
    message: str | None = Field(None, max_length=5000)


@router.post("/meets", status_code=201)
def create_meet(
    body: CreateMeetRequest,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    """Send a meeting request for the slot containing date_time."""
    meet = meet_service.request_meeting(
        deps,
        actor,
        body.event_id,
        ActorRef(body.receiver_id.strip(), body.receiver_role.strip().lower()),
        body.date_time,
        body.subject,
        body.message,
    )
    return _meet_response(meet)


# --- Listings ---


@router.get("/meets")
def list_my_meets(
    event_id: str | None = Query(None),
    status: str | None = Query(None),
    actor: ActorRef = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Meetings where the caller is sender or receiver, earliest first."""
    rows = meet_service.list_my_meetings(db, actor, event_id=event_id, status=status)
    return {"success": True, "data": [meet_service.meet_to_dict(m) for m in rows]}


@router.get("/meets/agenda/{actor_id}")
def actor_agenda(
    actor_id: str,
    event_id: str | None = Query(None),
    status: str | None = Query(None),
    actor: ActorRef = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Admin: any participant's meetings."""
    rows = meet_service.list_actor_agenda(db, actor, actor_id, event_id=event_id, status=status)
    return {"success": True, "data": [meet_service.meet_to_dict(m) for m in rows]}


@router.get("/meets/available-slots")
def available_slots(
    event_id: str = Query(...),
    actor_id: str = Query(..., description="The other participant"),
    date: str = Query(..., description="YYYY-MM-DD (UTC)"),
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    slots = meet_service.list_available_slots(deps, event_id, actor, actor_id, date)
    return {"success": True, "data": slots}


@router.get("/meets/exists/{other_actor_id}")
def meeting_exists(
    other_actor_id: str,
    actor: ActorRef = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """yes | pending | refused | no for the latest request between the caller and other_actor_id."""
    return {"success": True, "exists": meet_service.check_meeting_exists(db, actor.id, other_actor_id)}


@router.get("/meets/reminders")
def event_reminders(
    event_id: str = Query(...),
    actor: ActorRef = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Admin: reminder jobs still waiting to fire for an event."""
    if actor.role != ROLE_ADMIN:
        raise StateConflictError("Admin only")
    jobs = list_reminders(db, event_id)
    return {"success": True, "count": len(jobs), "data": jobs}


# --- Transitions ---


class ProposeTimeRequest(BaseModel):
    date_time: str | datetime


@router.post("/meets/{meeting_id}/accept")
def accept_meet(
    meeting_id: int,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    return _meet_response(meet_service.accept_meeting(deps, meeting_id, actor))


@router.post("/meets/{meeting_id}/propose")
def propose_new_time(
    meeting_id: int,
    body: ProposeTimeRequest,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    return _meet_response(meet_service.propose_new_time(deps, meeting_id, actor, body.date_time))


@router.post("/meets/{meeting_id}/confirm")
def confirm_new_time(
    meeting_id: int,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    """Original sender accepts the receiver's proposed time."""
    return _meet_response(meet_service.confirm_reschedule(deps, meeting_id, actor))


@router.post("/meets/{meeting_id}/decline")
def decline_meet(
    meeting_id: int,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    return _meet_response(meet_service.decline_meeting(deps, meeting_id, actor))


@router.post("/meets/{meeting_id}/cancel")
def cancel_meet(
    meeting_id: int,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    return _meet_response(meet_service.cancel_meeting(deps, meeting_id, actor))


@router.get("/meets/{meeting_id}/calendar")
def meet_calendar(
    meeting_id: int,
    actor: ActorRef = Depends(get_actor),
    deps: MeetingDeps = Depends(get_meeting_deps),
) -> dict[str, Any]:
    """Data for an .ics export of an accepted meeting."""
    return {"success": True, "data": meet_service.meeting_calendar(deps, meeting_id, actor)}
