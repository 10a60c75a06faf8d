"""
Meeting reminders: one deferred job per accepted meeting, fired lead_minutes before the slot.

The scheduling capability is injected (schedule / cancel / list_due) instead of living in a process-wide
engine; DbReminderStore keeps jobs in reminder_jobs so they survive restarts, and the APScheduler tick in
main.py drains whatever is due. A job whose meeting is no longer accepted cancels itself when it fires.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meetings.config import settings
from meetings.core.constants import STATUS_ACCEPTED
from meetings.core.errors import MeetingError
from meetings.models.meet_request import MeetRequest
from meetings.models.reminder_job import ReminderJob
from meetings.services.directory.types import ActorRef
from meetings.services.meeting_notify import notify_reminder
from meetings.services.scheduling.clock import parse_slot_key

if TYPE_CHECKING:
    from meetings.services.deps import MeetingDeps

logger = logging.getLogger(__name__)


def as_utc(dt: datetime) -> datetime:
    """SQLite hands DateTime(timezone=True) back naive; every stored instant is UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class DueReminder:
    key: int
    run_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)


class SchedulingCapability(Protocol):
    def schedule(self, at: datetime, key: int, payload: dict[str, Any]) -> None:
        """Create or replace the job for key."""
        ...

    def cancel(self, key: int) -> bool:
        """Drop the job for key. True if one existed."""
        ...

    def list_due(self, now: datetime) -> list[DueReminder]:
        ...


class DbReminderStore:
    """reminder_jobs-backed scheduling capability. Commits on its own; never part of a meeting transition."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _apply(self, row: ReminderJob, at: datetime, payload: dict[str, Any]) -> None:
        row.run_at = at
        row.payload = dict(payload)
        row.event_id = payload.get("event_id")

    def schedule(self, at: datetime, key: int, payload: dict[str, Any]) -> None:
        at = as_utc(at)
        row = self.db.query(ReminderJob).filter(ReminderJob.meeting_id == key).first()
        if row is None:
            row = ReminderJob(meeting_id=key)
            self._apply(row, at, payload)
            self.db.add(row)
            try:
                self.db.commit()
                return
            except IntegrityError:
                # Another caller scheduled the same meeting first: replace theirs
                self.db.rollback()
                row = self.db.query(ReminderJob).filter(ReminderJob.meeting_id == key).one()
        self._apply(row, at, payload)
        self.db.commit()

    def cancel(self, key: int) -> bool:
        deleted = self.db.query(ReminderJob).filter(ReminderJob.meeting_id == key).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def list_due(self, now: datetime) -> list[DueReminder]:
        rows = (
            self.db.query(ReminderJob)
            .filter(ReminderJob.run_at <= as_utc(now))
            .order_by(ReminderJob.run_at.asc())
            .all()
        )
        return [DueReminder(key=r.meeting_id, run_at=as_utc(r.run_at), payload=r.payload or {}) for r in rows]


def reminder_time(slot_iso: str, lead_minutes: int | None = None) -> datetime:
    lead = settings.reminder_lead_minutes if lead_minutes is None else lead_minutes
    return parse_slot_key(slot_iso) - timedelta(minutes=lead)


def schedule_meeting_reminder(
    reminders: SchedulingCapability,
    meet: MeetRequest,
    *,
    now: datetime | None = None,
    lead_minutes: int | None = None,
) -> datetime | None:
    """Schedule (or replace) the reminder for an accepted meeting. Returns run time, or None when it is already past."""
    now = now or datetime.now(timezone.utc)
    run_at = reminder_time(meet.requested_at, lead_minutes)
    if run_at <= now:
        logger.info("Meeting %s starts within the reminder lead time; no reminder scheduled", meet.id)
        return None
    reminders.schedule(run_at, meet.id, {"event_id": meet.event_id, "slot": meet.requested_at})
    logger.info("Reminder for meeting %s scheduled at %s", meet.id, run_at.isoformat())
    return run_at


def fire_reminder(deps: "MeetingDeps", job: DueReminder) -> bool:
    """Send the reminder if the meeting is still accepted; the job is removed either way. True if sent."""
    meet = deps.db.get(MeetRequest, job.key)
    if meet is None or meet.status != STATUS_ACCEPTED:
        deps.reminders.cancel(job.key)
        logger.debug("Reminder for meeting %s dropped: meeting no longer accepted", job.key)
        return False
    try:
        sender = deps.directory.resolve(ActorRef(meet.sender_id, meet.sender_role))
        receiver = deps.directory.resolve(ActorRef(meet.receiver_id, meet.receiver_role))
    except MeetingError as e:
        deps.reminders.cancel(job.key)
        logger.warning("Reminder for meeting %s dropped: %s", job.key, e)
        return False
    # job is gone before the send: at most one reminder per job
    deps.reminders.cancel(job.key)
    notify_reminder(deps.mailer, meet, sender, receiver)
    return True


def run_due_reminders(deps: "MeetingDeps", now: datetime | None = None) -> int:
    """Fire every due reminder. A failing job is logged and left for the next tick. Returns reminders sent."""
    now = now or datetime.now(timezone.utc)
    sent = 0
    for job in deps.reminders.list_due(now):
        try:
            if fire_reminder(deps, job):
                sent += 1
        except Exception as e:
            logger.exception("Reminder for meeting %s failed: %s", job.key, e)
            deps.db.rollback()
    if sent:
        logger.info("run_due_reminders: %s reminders sent", sent)
    return sent


def list_reminders(db: Session, event_id: str) -> list[dict]:
    """Pending reminder jobs for an event (admin view)."""
    rows = (
        db.query(ReminderJob)
        .filter(ReminderJob.event_id == event_id)
        .order_by(ReminderJob.run_at.asc())
        .all()
    )
    return [
        {
            "job_id": r.id,
            "meeting_id": r.meeting_id,
            "run_at": as_utc(r.run_at).isoformat(),
        }
        for r in rows
    ]
