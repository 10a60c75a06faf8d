"""
Slot ledger: the durable record of finalized slots, one SlotLock row per (event, actor, slot).

The unique constraint on slot_locks is the only hard mutual exclusion in the engine. Everything in
conflicts.py is an optimistic pre-check; this is where two racing acceptances are actually decided.
"""
import logging
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meetings.core.constants import STATUS_ACCEPTED
from meetings.core.errors import SlotConflictError
from meetings.models.meet_request import MeetRequest
from meetings.models.slot_lock import SlotLock
from meetings.services.directory.types import ActorRef

logger = logging.getLogger(__name__)


def find_locks(db: Session, event_id: str, actor_ids: Sequence[str], slot_iso: str) -> list[SlotLock]:
    return (
        db.query(SlotLock)
        .filter(
            SlotLock.event_id == event_id,
            SlotLock.actor_id.in_(list(actor_ids)),
            SlotLock.slot_iso == slot_iso,
        )
        .all()
    )


def lock_slot(
    db: Session,
    event_id: str,
    participants: Sequence[ActorRef],
    slot_iso: str,
    meet_request_id: int | None = None,
) -> list[SlotLock]:
    """
    Insert one lock per participant as a single unit (not committed; the caller commits with its transition).
    On a unique violation the session is rolled back, which drops every lock inserted in this attempt
    along with any other uncommitted change, and SlotConflictError is raised.
    """
    rows = [
        SlotLock(
            event_id=event_id,
            actor_id=p.id,
            actor_role=p.role,
            slot_iso=slot_iso,
            meet_request_id=meet_request_id,
        )
        for p in participants
    ]
    db.add_all(rows)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("Slot lock conflict: event=%s slot=%s actors=%s", event_id, slot_iso, [p.id for p in participants])
        raise SlotConflictError(
            "Slot has just been taken",
            event_id=event_id,
            slot=slot_iso,
        )
    return rows


def release_slot(db: Session, event_id: str, actor_ids: Sequence[str], slot_iso: str) -> int:
    """Delete the locks for these actors at slot (not committed). Returns rows deleted."""
    deleted = (
        db.query(SlotLock)
        .filter(
            SlotLock.event_id == event_id,
            SlotLock.actor_id.in_(list(actor_ids)),
            SlotLock.slot_iso == slot_iso,
        )
        .delete(synchronize_session=False)
    )
    logger.info("Released %s slot locks: event=%s slot=%s", deleted, event_id, slot_iso)
    return deleted


def locked_slot_keys(
    db: Session, event_id: str, actor_ids: Sequence[str], start_key: str, end_key: str
) -> set[str]:
    """Slot keys in [start_key, end_key) locked by any of the actors."""
    rows = (
        db.query(SlotLock.slot_iso)
        .filter(
            SlotLock.event_id == event_id,
            SlotLock.actor_id.in_(list(actor_ids)),
            SlotLock.slot_iso >= start_key,
            SlotLock.slot_iso < end_key,
        )
        .all()
    )
    return {r.slot_iso for r in rows}


def rebuild_locks(db: Session, event_id: str | None = None) -> int:
    """
    Recreate slot_locks from accepted meetings (not committed). For repairing a ledger that drifted from
    meet_requests, e.g. after a manual data fix. Returns locks written.
    """
    stale = db.query(SlotLock)
    accepted = db.query(MeetRequest).filter(MeetRequest.status == STATUS_ACCEPTED)
    if event_id:
        stale = stale.filter(SlotLock.event_id == event_id)
        accepted = accepted.filter(MeetRequest.event_id == event_id)
    stale.delete(synchronize_session=False)
    count = 0
    for meet in accepted.order_by(MeetRequest.id.asc()).all():
        for actor_id, role in ((meet.sender_id, meet.sender_role), (meet.receiver_id, meet.receiver_role)):
            db.add(
                SlotLock(
                    event_id=meet.event_id,
                    actor_id=actor_id,
                    actor_role=role,
                    slot_iso=meet.requested_at,
                    meet_request_id=meet.id,
                )
            )
            count += 1
    db.flush()
    logger.info("Rebuilt %s slot locks (event=%s)", count, event_id or "all")
    return count
