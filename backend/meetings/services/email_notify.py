"""
Send meeting notifications by email via SMTP (Google Gmail or other).
Set SMTP_USER, SMTP_PASSWORD (and optionally NOTIFY_FROM) in .env. Use a Gmail App Password (not your normal password).
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from meetings.config import settings

logger = logging.getLogger(__name__)


def _from_address() -> str:
    if (settings.notify_from or "").strip():
        return settings.notify_from.strip()
    user = (settings.smtp_user or "").strip()
    if user:
        return f"Event Meetings <{user}>"
    return "Event Meetings <noreply@localhost>"


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """
    Fire-and-forget: send one HTML email via SMTP.
    Returns True if sent, False if skipped (no recipient / SMTP not configured) or failed. Never raises.
    """
    to_email = (to_email or "").strip()
    if not to_email:
        return False
    user = (settings.smtp_user or "").strip()
    password = (settings.smtp_password or "").strip()
    if not user or not password:
        logger.debug("SMTP_USER or SMTP_PASSWORD not set; skipping email %r to %s", subject, to_email)
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(user, password)
            server.sendmail(user, [to_email], msg.as_string())
        logger.info("Email %r sent to %s", subject, to_email)
        return True
    except Exception as e:
        logger.exception("Failed to send email %r to %s: %s", subject, to_email, e)
        return False
