"""Runs every REMINDER_POLL_SECONDS: send due meeting reminders and drop the jobs."""
import logging

from meetings.db.session import SessionLocal
from meetings.services.deps import MeetingDeps
from meetings.services.directory.http_directory import build_http_directory
from meetings.services.reminder_service import run_due_reminders

logger = logging.getLogger(__name__)


def run_due_reminders_job() -> None:
    db = SessionLocal()
    try:
        sent = run_due_reminders(MeetingDeps(db, build_http_directory()))
        logger.debug("Reminder tick done: %s sent", sent)
    finally:
        db.close()
