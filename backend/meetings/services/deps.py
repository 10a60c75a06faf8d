"""
Dependencies for the meeting services (injected per request or per job run).
"""
from sqlalchemy.orm import Session

from meetings.services.directory.registry import Directory
from meetings.services.email_notify import send_email
from meetings.services.meeting_notify import Mailer
from meetings.services.reminder_service import DbReminderStore, SchedulingCapability


class MeetingDeps:
    """DB session, directory and side-effect channels passed to every meeting operation."""

    def __init__(
        self,
        db: Session,
        directory: Directory,
        *,
        reminders: SchedulingCapability | None = None,
        mailer: Mailer | None = None,
    ):
        self.db = db
        self.directory = directory
        # Reminders default to the reminder_jobs table on the same database
        self.reminders = reminders if reminders is not None else DbReminderStore(db)
        self.mailer = mailer or send_email
