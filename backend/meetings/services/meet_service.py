"""
Meeting requests between two event participants.

Lifecycle (who may move it in brackets):
    (new) -> pending                    [sender]
    pending -> accepted                 [receiver]
    pending -> reschedule-proposed      [receiver]
    reschedule-proposed -> accepted     [original sender]
    pending -> declined                 [receiver]
    reschedule-proposed -> declined     [original sender]
    accepted -> declined                [either participant]
    accepted -> cancelled               [either participant or admin]

Every status write is a compare-and-set on the status we read, so a concurrent transition loses with
StateConflictError instead of overwriting. Entering accepted takes both slot locks in the same transaction;
leaving it releases them. Reminders and emails run after commit and never undo a transition.
"""
import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from meetings.core.constants import (
    ACTION_ACCEPTED,
    ACTION_CANCELLED,
    ACTION_DECLINED,
    ACTION_PROPOSED,
    ACTION_SENT,
    MEETING_ROLES,
    ROLE_ADMIN,
    STATUS_ACCEPTED,
    STATUS_CANCELLED,
    STATUS_DECLINED,
    STATUS_PENDING,
    STATUS_RESCHEDULE_PROPOSED,
    STATUSES,
    SUBJECT_MIN_LENGTH,
)
from meetings.core.errors import NotFoundError, SlotConflictError, StateConflictError, ValidationError
from meetings.models.meet_request import MeetHistory, MeetRequest
from meetings.services import meeting_notify
from meetings.services.calendar_export import calendar_data
from meetings.services.deps import MeetingDeps
from meetings.services.directory.types import ActorRef
from meetings.services.reminder_service import schedule_meeting_reminder
from meetings.services.scheduling import conflicts, ledger
from meetings.services.scheduling.clock import TimestampInput, parse_slot_key, slot_key, utc_day
from meetings.services.scheduling.window import daily_window, ensure_day_in_event, window_for_slot

logger = logging.getLogger(__name__)

PARTY_SENDER = "sender"
PARTY_RECEIVER = "receiver"
PARTY_ADMIN = "admin"

# (from, to) -> parties allowed to make the move. Anything not listed is a state conflict.
TRANSITIONS: dict[tuple[str, str], tuple[str, ...]] = {
    (STATUS_PENDING, STATUS_ACCEPTED): (PARTY_RECEIVER,),
    (STATUS_PENDING, STATUS_RESCHEDULE_PROPOSED): (PARTY_RECEIVER,),
    (STATUS_RESCHEDULE_PROPOSED, STATUS_ACCEPTED): (PARTY_SENDER,),
    (STATUS_PENDING, STATUS_DECLINED): (PARTY_RECEIVER,),
    (STATUS_RESCHEDULE_PROPOSED, STATUS_DECLINED): (PARTY_SENDER,),
    (STATUS_ACCEPTED, STATUS_DECLINED): (PARTY_SENDER, PARTY_RECEIVER),
    (STATUS_ACCEPTED, STATUS_CANCELLED): (PARTY_SENDER, PARTY_RECEIVER, PARTY_ADMIN),
}

# check_meeting_exists answers
EXISTS_YES = "yes"
EXISTS_PENDING = "pending"
EXISTS_REFUSED = "refused"
EXISTS_NO = "no"


# --- Helpers ---


def sender_ref(meet: MeetRequest) -> ActorRef:
    return ActorRef(meet.sender_id, meet.sender_role)


def receiver_ref(meet: MeetRequest) -> ActorRef:
    return ActorRef(meet.receiver_id, meet.receiver_role)


def party_of(meet: MeetRequest, actor: ActorRef) -> str | None:
    if actor == sender_ref(meet):
        return PARTY_SENDER
    if actor == receiver_ref(meet):
        return PARTY_RECEIVER
    if actor.role == ROLE_ADMIN:
        return PARTY_ADMIN
    return None


def check_transition(meet: MeetRequest, actor: ActorRef, to_status: str) -> str:
    """Return the current status if actor may move meet to to_status; raise StateConflictError otherwise."""
    from_status = meet.status
    allowed = TRANSITIONS.get((from_status, to_status))
    if allowed is None:
        raise StateConflictError(
            f"Cannot move meeting from {from_status} to {to_status}",
            meeting_id=meet.id,
            status=from_status,
        )
    if party_of(meet, actor) not in allowed:
        raise StateConflictError(
            f"Only the {' or '.join(allowed)} can move this meeting to {to_status}",
            meeting_id=meet.id,
            status=from_status,
        )
    return from_status


def _compare_and_set(db: Session, meeting_id: int, from_status: str, values: dict) -> None:
    """Status-guarded update. Rolls back and raises if someone else moved the meeting first."""
    updated = (
        db.query(MeetRequest)
        .filter(MeetRequest.id == meeting_id, MeetRequest.status == from_status)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        raise StateConflictError(
            "Meeting was changed by another request; reload and retry",
            meeting_id=meeting_id,
            expected_status=from_status,
        )


def _append_history(db: Session, meeting_id: int, actor_id: str, action: str, note: str | None = None) -> None:
    db.add(MeetHistory(meet_request_id=meeting_id, actor_id=actor_id, action=action, note=note))


def _notify(deps: MeetingDeps, send, meet: MeetRequest) -> int:
    """Resolve both parties and send; delivery problems are logged, never raised."""
    try:
        sender = deps.directory.resolve(sender_ref(meet))
        receiver = deps.directory.resolve(receiver_ref(meet))
        return send(deps.mailer, meet, sender, receiver)
    except Exception as e:
        logger.exception("Notification for meeting %s failed: %s", meet.id, e)
        return 0


def _cancel_reminder(deps: MeetingDeps, meeting_id: int) -> None:
    try:
        deps.reminders.cancel(meeting_id)
    except Exception as e:
        logger.exception("Cancelling reminder for meeting %s failed: %s", meeting_id, e)
        deps.db.rollback()


def get_meeting(db: Session, meeting_id: int) -> MeetRequest:
    meet = db.get(MeetRequest, meeting_id)
    if meet is None:
        raise NotFoundError("Meeting not found", meeting_id=meeting_id)
    return meet


def meet_to_dict(meet: MeetRequest) -> dict[str, Any]:
    return {
        "id": meet.id,
        "event_id": meet.event_id,
        "sender": {"id": meet.sender_id, "role": meet.sender_role},
        "receiver": {"id": meet.receiver_id, "role": meet.receiver_role},
        "subject": meet.subject,
        "message": meet.message,
        "requested_at": meet.requested_at,
        "proposed_new_at": meet.proposed_new_at,
        "accepted_at": meet.accepted_at,
        "status": meet.status,
        "history": [
            {
                "actor_id": h.actor_id,
                "action": h.action,
                "note": h.note,
                "at": h.at.isoformat() if h.at else None,
            }
            for h in meet.history
        ],
        "created_at": meet.created_at.isoformat() if meet.created_at else None,
        "updated_at": meet.updated_at.isoformat() if meet.updated_at else None,
    }


# --- Transitions ---


def request_meeting(
    deps: MeetingDeps,
    sender: ActorRef,
    event_id: str,
    receiver: ActorRef,
    date_time: TimestampInput,
    subject: str,
    message: str | None = None,
) -> MeetRequest:
    """Create a pending request for the 30-minute slot containing date_time."""
    missing = [
        name
        for name, value in (
            ("event_id", event_id),
            ("receiver_id", receiver.id),
            ("receiver_role", receiver.role),
            ("date_time", date_time),
            ("subject", subject),
        )
        if not value
    ]
    if missing:
        raise ValidationError("Missing required fields", missing=missing)
    subject = subject.strip()
    if len(subject) < SUBJECT_MIN_LENGTH:
        raise ValidationError(f"Subject must be at least {SUBJECT_MIN_LENGTH} characters")
    if receiver.role not in MEETING_ROLES:
        raise ValidationError(f"Unknown receiver role: {receiver.role}")
    if sender.role not in MEETING_ROLES:
        raise ValidationError(f"Role {sender.role} cannot send meeting requests")
    # slot locks key on actor id only: one id under two roles is one person
    if sender.id == receiver.id:
        raise ValidationError("Cannot book meeting with yourself")

    db = deps.db
    event = deps.directory.event_bounds(event_id)
    slot = slot_key(date_time)
    window_for_slot(event.start, event.end, slot)

    receiver_identity = deps.directory.resolve(receiver)
    sender_identity = deps.directory.resolve(sender)
    if not receiver_identity.open_to_meetings:
        raise StateConflictError("Receiver is not open to meetings", receiver_id=receiver.id)
    if not sender_identity.open_to_meetings:
        raise StateConflictError("You are not open to meetings (edit profile to enable)", sender_id=sender.id)
    if not receiver_identity.is_available_on(parse_slot_key(slot).date()):
        raise ValidationError("Receiver unavailable that day", slot=slot)

    if conflicts.is_slot_busy(db, event_id, slot, [sender, receiver]):
        raise SlotConflictError("Slot already held by another request/meeting", slot=slot)

    meet = MeetRequest(
        event_id=event_id,
        sender_id=sender.id,
        sender_role=sender.role,
        receiver_id=receiver.id,
        receiver_role=receiver.role,
        subject=subject,
        message=(message or "").strip() or None,
        requested_at=slot,
        status=STATUS_PENDING,
    )
    db.add(meet)
    db.flush()
    _append_history(db, meet.id, sender.id, ACTION_SENT, slot)
    db.commit()
    db.refresh(meet)
    logger.info("Meeting %s requested: event=%s slot=%s %s -> %s", meet.id, event_id, slot, sender.id, receiver.id)

    meeting_notify.notify_request_sent(deps.mailer, meet, sender_identity, receiver_identity)
    return meet


def accept_meeting(deps: MeetingDeps, meeting_id: int, actor: ActorRef) -> MeetRequest:
    """
    Receiver accepts a pending request, or the original sender accepts a proposed new time.
    Locks the finalized slot for both parties; SlotConflictError leaves the request untouched.
    """
    db = deps.db
    meet = get_meeting(db, meeting_id)
    from_status = check_transition(meet, actor, STATUS_ACCEPTED)
    final_slot = meet.requested_at if from_status == STATUS_PENDING else meet.proposed_new_at
    if not final_slot:
        raise ValidationError("Meeting has no proposed time to accept", meeting_id=meeting_id)
    event_id = meet.event_id
    participants = [sender_ref(meet), receiver_ref(meet)]

    ledger.lock_slot(db, event_id, participants, final_slot, meeting_id)
    _compare_and_set(
        db,
        meeting_id,
        from_status,
        {
            MeetRequest.status: STATUS_ACCEPTED,
            MeetRequest.requested_at: final_slot,
            MeetRequest.accepted_at: final_slot,
            MeetRequest.proposed_new_at: None,
        },
    )
    _append_history(db, meeting_id, actor.id, ACTION_ACCEPTED, final_slot)
    db.commit()
    db.refresh(meet)
    logger.info("Meeting %s accepted: event=%s slot=%s", meeting_id, event_id, final_slot)

    try:
        schedule_meeting_reminder(deps.reminders, meet)
    except Exception as e:
        logger.exception("Scheduling reminder for meeting %s failed: %s", meeting_id, e)
        db.rollback()
    _notify(deps, meeting_notify.notify_accepted, meet)
    return meet


# Accepting a proposed new time is the same move, made by the original sender
confirm_reschedule = accept_meeting


def propose_new_time(deps: MeetingDeps, meeting_id: int, actor: ActorRef, date_time: TimestampInput) -> MeetRequest:
    """Receiver counter-proposes a different slot for a pending request."""
    if not date_time:
        raise ValidationError("date_time required")
    db = deps.db
    meet = get_meeting(db, meeting_id)
    from_status = check_transition(meet, actor, STATUS_RESCHEDULE_PROPOSED)

    slot = slot_key(date_time)
    event = deps.directory.event_bounds(meet.event_id)
    window_for_slot(event.start, event.end, slot)
    if conflicts.is_slot_busy(db, meet.event_id, slot, [sender_ref(meet), receiver_ref(meet)], exclude_request_id=meeting_id):
        raise SlotConflictError("One of you is busy at that time", slot=slot)

    _compare_and_set(
        db,
        meeting_id,
        from_status,
        {MeetRequest.status: STATUS_RESCHEDULE_PROPOSED, MeetRequest.proposed_new_at: slot},
    )
    _append_history(db, meeting_id, actor.id, ACTION_PROPOSED, slot)
    db.commit()
    db.refresh(meet)
    logger.info("Meeting %s: new time proposed %s", meeting_id, slot)

    _notify(deps, meeting_notify.notify_new_time_proposed, meet)
    return meet


def decline_meeting(deps: MeetingDeps, meeting_id: int, actor: ActorRef) -> MeetRequest:
    """Decline a pending/proposed request, or back out of an accepted meeting (frees the slot)."""
    db = deps.db
    meet = get_meeting(db, meeting_id)
    from_status = check_transition(meet, actor, STATUS_DECLINED)
    event_id, slot = meet.event_id, meet.requested_at
    actor_ids = [meet.sender_id, meet.receiver_id]

    _compare_and_set(db, meeting_id, from_status, {MeetRequest.status: STATUS_DECLINED})
    if from_status == STATUS_ACCEPTED:
        ledger.release_slot(db, event_id, actor_ids, slot)
    _append_history(db, meeting_id, actor.id, ACTION_DECLINED, from_status)
    db.commit()
    db.refresh(meet)
    logger.info("Meeting %s declined (was %s)", meeting_id, from_status)

    if from_status == STATUS_ACCEPTED:
        _cancel_reminder(deps, meeting_id)
    _notify(deps, meeting_notify.notify_declined, meet)
    return meet


def cancel_meeting(deps: MeetingDeps, meeting_id: int, actor: ActorRef) -> MeetRequest:
    """Cancel an accepted meeting (either participant, or an admin). Frees the slot immediately."""
    db = deps.db
    meet = get_meeting(db, meeting_id)
    from_status = check_transition(meet, actor, STATUS_CANCELLED)
    event_id, slot = meet.event_id, meet.requested_at
    actor_ids = [meet.sender_id, meet.receiver_id]

    _compare_and_set(db, meeting_id, from_status, {MeetRequest.status: STATUS_CANCELLED})
    ledger.release_slot(db, event_id, actor_ids, slot)
    _append_history(db, meeting_id, actor.id, ACTION_CANCELLED)
    db.commit()
    db.refresh(meet)
    logger.info("Meeting %s cancelled by %s", meeting_id, actor.id)

    _cancel_reminder(deps, meeting_id)
    _notify(deps, meeting_notify.notify_cancelled, meet)
    return meet


# --- Reads ---


def _check_status_filter(status: str | None) -> None:
    if status and status not in STATUSES:
        raise ValidationError(f"Unknown status: {status}", allowed=list(STATUSES))


def list_my_meetings(
    db: Session, actor: ActorRef, event_id: str | None = None, status: str | None = None
) -> list[MeetRequest]:
    """Meetings where actor is sender or receiver, earliest slot first."""
    _check_status_filter(status)
    q = db.query(MeetRequest).filter(
        or_(
            (MeetRequest.sender_id == actor.id) & (MeetRequest.sender_role == actor.role),
            (MeetRequest.receiver_id == actor.id) & (MeetRequest.receiver_role == actor.role),
        )
    )
    if event_id:
        q = q.filter(MeetRequest.event_id == event_id)
    if status:
        q = q.filter(MeetRequest.status == status)
    return q.order_by(MeetRequest.requested_at.asc(), MeetRequest.id.asc()).all()


def list_actor_agenda(
    db: Session, admin: ActorRef, actor_id: str, event_id: str | None = None, status: str | None = None
) -> list[MeetRequest]:
    """Admin view of any participant's meetings (matched by id on either side)."""
    if admin.role != ROLE_ADMIN:
        raise StateConflictError("Admin only")
    if not actor_id:
        raise ValidationError("actor_id required")
    _check_status_filter(status)
    q = db.query(MeetRequest).filter(or_(MeetRequest.sender_id == actor_id, MeetRequest.receiver_id == actor_id))
    if event_id:
        q = q.filter(MeetRequest.event_id == event_id)
    if status:
        q = q.filter(MeetRequest.status == status)
    return q.order_by(MeetRequest.requested_at.asc(), MeetRequest.id.asc()).all()


def list_available_slots(
    deps: MeetingDeps,
    event_id: str,
    requester: ActorRef,
    other_actor_id: str,
    day: str | date | datetime,
) -> list[str]:
    """Free 30-minute slots in the day's window that neither requester nor other_actor_id holds."""
    if not other_actor_id or not day:
        raise ValidationError("actor_id and date required")
    event = deps.directory.event_bounds(event_id)
    target = utc_day(day)
    ensure_day_in_event(event.start, event.end, target)
    window = daily_window(event.start, event.end, target)
    busy = conflicts.busy_slot_keys(
        deps.db, event_id, [requester.id, other_actor_id], window.start_key, window.end_key
    )
    return [key for key in window.slot_keys() if key not in busy]


def check_meeting_exists(db: Session, actor_id: str, other_actor_id: str) -> str:
    """
    Latest request between two actors in either direction, bucketed:
    yes (accepted), pending (pending/reschedule-proposed), refused (declined/cancelled), no (none).
    """
    if not actor_id or not other_actor_id:
        raise ValidationError("Both actor ids are required")
    meet = (
        db.query(MeetRequest)
        .filter(
            or_(
                (MeetRequest.sender_id == actor_id) & (MeetRequest.receiver_id == other_actor_id),
                (MeetRequest.sender_id == other_actor_id) & (MeetRequest.receiver_id == actor_id),
            )
        )
        .order_by(MeetRequest.updated_at.desc(), MeetRequest.id.desc())
        .first()
    )
    if meet is None:
        return EXISTS_NO
    if meet.status == STATUS_ACCEPTED:
        return EXISTS_YES
    if meet.status in (STATUS_DECLINED, STATUS_CANCELLED):
        return EXISTS_REFUSED
    return EXISTS_PENDING


def meeting_calendar(deps: MeetingDeps, meeting_id: int, actor: ActorRef) -> dict[str, Any]:
    """Calendar export data for an accepted meeting; participants and admins only."""
    meet = get_meeting(deps.db, meeting_id)
    if meet.status != STATUS_ACCEPTED:
        raise StateConflictError("Calendar data available only for accepted meetings", status=meet.status)
    if party_of(meet, actor) is None:
        raise StateConflictError("Not allowed", meeting_id=meeting_id)
    event = deps.directory.event_bounds(meet.event_id)
    sender = deps.directory.resolve(sender_ref(meet))
    receiver = deps.directory.resolve(receiver_ref(meet))
    return calendar_data(meet, sender, receiver, event)
