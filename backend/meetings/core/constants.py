"""
Centralized constants for the meeting engine and its scheduler (Encapsulate What Changes).

Change job IDs, statuses or grid sizes here instead of scattering literals across services and routes.
"""
# Scheduler job IDs (must match ids used in main.py add_job)
REMINDER_DISPATCH_JOB_ID = "meeting_reminders"

# Slot grid: every meeting occupies exactly one 30-minute bucket on the UTC grid
SLOT_MINUTES = 30
MEETING_DURATION_MINUTES = SLOT_MINUTES

# Used when the event's start/end time-of-day gives an unusable daily window (inverted, empty or midnight-midnight)
FALLBACK_WINDOW_START = (10, 0)
FALLBACK_WINDOW_END = (16, 0)

# Meeting request lifecycle
STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_DECLINED = "declined"
STATUS_RESCHEDULE_PROPOSED = "reschedule-proposed"
STATUS_CANCELLED = "cancelled"
STATUSES = (
    STATUS_PENDING,
    STATUS_ACCEPTED,
    STATUS_DECLINED,
    STATUS_RESCHEDULE_PROPOSED,
    STATUS_CANCELLED,
)
# Requests in these statuses hold their requested/proposed slot for both parties
HOLDING_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_RESCHEDULE_PROPOSED)
TERMINAL_STATUSES = (STATUS_DECLINED, STATUS_CANCELLED)

# History actions
ACTION_SENT = "sent"
ACTION_ACCEPTED = "accepted"
ACTION_PROPOSED = "proposed"
ACTION_DECLINED = "declined"
ACTION_CANCELLED = "cancelled"

# Actor roles. Admins can cancel and read agendas but never send or receive requests.
ROLE_ATTENDEE = "attendee"
ROLE_EXHIBITOR = "exhibitor"
ROLE_SPEAKER = "speaker"
ROLE_ADMIN = "admin"
MEETING_ROLES = (ROLE_ATTENDEE, ROLE_EXHIBITOR, ROLE_SPEAKER)

SUBJECT_MIN_LENGTH = 3
MESSAGE_PREVIEW_CHARS = 1000
