"""
Busy check for a candidate slot across both participants.

Two sources, both consulted:
  (a) requests still holding a slot (pending, accepted, reschedule-proposed) on either their
      requested or proposed time; covers holds that are not finalized yet
  (b) slot locks; authoritative once a meeting is accepted
Participants are matched by actor id on either side of a request, the same key the ledger locks on.
"""
from typing import Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from meetings.core.constants import HOLDING_STATUSES
from meetings.models.meet_request import MeetRequest
from meetings.services.directory.types import ActorRef
from meetings.services.scheduling import ledger


def _involving(actor_ids: list[str]):
    return or_(MeetRequest.sender_id.in_(actor_ids), MeetRequest.receiver_id.in_(actor_ids))


def find_request_holds(
    db: Session,
    event_id: str,
    slot_iso: str,
    actor_ids: Sequence[str],
    exclude_request_id: int | None = None,
) -> list[MeetRequest]:
    ids = list(actor_ids)
    q = db.query(MeetRequest).filter(
        MeetRequest.event_id == event_id,
        MeetRequest.status.in_(HOLDING_STATUSES),
        _involving(ids),
        or_(MeetRequest.requested_at == slot_iso, MeetRequest.proposed_new_at == slot_iso),
    )
    if exclude_request_id is not None:
        q = q.filter(MeetRequest.id != exclude_request_id)
    return q.all()


def is_slot_busy(
    db: Session,
    event_id: str,
    slot_iso: str,
    participants: Sequence[ActorRef],
    exclude_request_id: int | None = None,
) -> bool:
    """True if either participant already holds slot_iso in this event."""
    ids = [p.id for p in participants]
    if find_request_holds(db, event_id, slot_iso, ids, exclude_request_id=exclude_request_id):
        return True
    return bool(ledger.find_locks(db, event_id, ids, slot_iso))


def busy_slot_keys(
    db: Session, event_id: str, actor_ids: Sequence[str], start_key: str, end_key: str
) -> set[str]:
    """Every slot key in [start_key, end_key) held by any of the actors, from requests and locks."""
    ids = list(actor_ids)
    busy = ledger.locked_slot_keys(db, event_id, ids, start_key, end_key)
    rows = (
        db.query(MeetRequest.requested_at, MeetRequest.proposed_new_at)
        .filter(
            MeetRequest.event_id == event_id,
            MeetRequest.status.in_(HOLDING_STATUSES),
            _involving(ids),
            or_(
                (MeetRequest.requested_at >= start_key) & (MeetRequest.requested_at < end_key),
                (MeetRequest.proposed_new_at >= start_key) & (MeetRequest.proposed_new_at < end_key),
            ),
        )
        .all()
    )
    for requested_at, proposed_new_at in rows:
        for key in (requested_at, proposed_new_at):
            if key and start_key <= key < end_key:
                busy.add(key)
    return busy
