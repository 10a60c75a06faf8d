"""
Meeting notification emails: request sent, accepted, declined, new time proposed, cancelled, reminder.

Best-effort: every helper swallows and logs delivery failures, because notifications must never undo a
committed transition. Each helper returns how many emails were actually sent.
"""
import html
import logging
from typing import Callable

from meetings.config import settings
from meetings.core.constants import MESSAGE_PREVIEW_CHARS
from meetings.models.meet_request import MeetRequest
from meetings.services.directory.types import ActorIdentity
from meetings.services.scheduling.clock import parse_slot_key

logger = logging.getLogger(__name__)

Mailer = Callable[[str, str, str], bool]


def pretty_slot(slot_iso: str) -> str:
    """'2025-11-04T09:00:00Z' -> 'Tuesday, November 04, 2025 09:00 (UTC)'."""
    return parse_slot_key(slot_iso).strftime("%A, %B %d, %Y %H:%M") + " (UTC)"


def meetings_link() -> str:
    return f"{settings.frontend_url}/meetings"


def _send_all(mailer: Mailer, messages: list[tuple[str, str, str]]) -> int:
    sent = 0
    for to, subject, body in messages:
        try:
            if mailer(to, subject, body):
                sent += 1
        except Exception as e:
            logger.exception("Notification %r to %s failed: %s", subject, to, e)
    return sent


def _details(meet: MeetRequest, slot_iso: str) -> str:
    parts = [
        f"<p><strong>When:</strong> {pretty_slot(slot_iso)}</p>",
        f"<p><strong>Subject:</strong> {html.escape(meet.subject)}</p>",
    ]
    if meet.message:
        parts.append(f"<p><strong>Message:</strong> {html.escape(meet.message[:MESSAGE_PREVIEW_CHARS])}</p>")
    return "\n".join(parts)


def notify_request_sent(mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity) -> int:
    link = meetings_link()
    details = _details(meet, meet.requested_at)
    return _send_all(mailer, [
        (
            receiver.email,
            "New meeting request",
            f"<p><strong>{html.escape(sender.display_name)}</strong> wants to meet you.</p>\n{details}\n"
            f'<p>Manage requests in the app: <a href="{link}">{link}</a></p>',
        ),
        (
            sender.email,
            "Your meeting request was sent",
            f"<p>You requested a meeting with <strong>{html.escape(receiver.display_name)}</strong>.</p>\n{details}\n"
            f'<p>Track it here: <a href="{link}">{link}</a></p>',
        ),
    ])


def notify_accepted(mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity) -> int:
    when = pretty_slot(meet.requested_at)
    return _send_all(mailer, [
        (sender.email, "Meeting confirmed",
         f"<p>Your meeting with {html.escape(receiver.display_name)} has been confirmed for {when}.</p>"),
        (receiver.email, "Meeting confirmed",
         f"<p>Your meeting with {html.escape(sender.display_name)} has been confirmed for {when}.</p>"),
    ])


def notify_declined(mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity) -> int:
    return _send_all(mailer, [
        (sender.email, "Meeting declined", "<p>One of the parties has declined the meeting.</p>"),
        (receiver.email, "Meeting declined", "<p>Meeting has been declined.</p>"),
    ])


def notify_new_time_proposed(
    mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity
) -> int:
    base = f"{settings.frontend_url}/meets/{meet.id}"
    return _send_all(mailer, [
        (
            sender.email,
            "New time proposed for meeting",
            f"<p>{html.escape(receiver.display_name)} proposed {pretty_slot(meet.proposed_new_at)}.</p>\n"
            f'<a href="{base}?action=confirm">Accept</a> | <a href="{base}?action=decline">Decline</a>',
        ),
    ])


def notify_cancelled(mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity) -> int:
    body = f"<p>Your meeting scheduled for {pretty_slot(meet.requested_at)} has been cancelled.</p>"
    return _send_all(mailer, [
        (sender.email, "Meeting cancelled", body),
        (receiver.email, "Meeting cancelled", body),
    ])


def notify_reminder(mailer: Mailer, meet: MeetRequest, sender: ActorIdentity, receiver: ActorIdentity) -> int:
    when = pretty_slot(meet.requested_at)
    subject = "Reminder: your meeting in 1 hour"
    return _send_all(mailer, [
        (sender.email, subject,
         f"<p>This is a reminder: <strong>{html.escape(meet.subject)}</strong><br/>Time: {when}</p>"),
        (receiver.email, subject,
         f"<p>This is a reminder for your meeting with {html.escape(sender.display_name)}.<br/>Time: {when}</p>"),
    ])
