from meetings.models.meet_request import MeetHistory, MeetRequest
from meetings.models.reminder_job import ReminderJob
from meetings.models.slot_lock import SlotLock

__all__ = [
    "MeetHistory",
    "MeetRequest",
    "ReminderJob",
    "SlotLock",
]
