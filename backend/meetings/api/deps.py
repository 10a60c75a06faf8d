"""
Request-scoped dependencies for the meeting routes. Tests override get_db / get_directory / get_mailer.

Caller identity comes from X-Actor-Id and X-Actor-Role headers; authentication happens upstream.
"""
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from meetings.core.constants import MEETING_ROLES, ROLE_ADMIN
from meetings.core.errors import ValidationError
from meetings.db.session import get_db
from meetings.services.deps import MeetingDeps
from meetings.services.directory.http_directory import build_http_directory
from meetings.services.directory.registry import Directory
from meetings.services.directory.types import ActorRef
from meetings.services.email_notify import send_email
from meetings.services.meeting_notify import Mailer


@lru_cache(maxsize=1)
def get_directory() -> Directory:
    return build_http_directory()


def get_mailer() -> Mailer:
    return send_email


def get_actor(
    x_actor_id: str | None = Header(None, alias="X-Actor-Id"),
    x_actor_role: str | None = Header(None, alias="X-Actor-Role"),
) -> ActorRef:
    actor_id = (x_actor_id or "").strip()
    role = (x_actor_role or "").strip().lower()
    if not actor_id or not role:
        raise ValidationError("X-Actor-Id and X-Actor-Role headers are required")
    if role not in MEETING_ROLES and role != ROLE_ADMIN:
        raise ValidationError(f"Unknown role: {role}")
    return ActorRef(actor_id, role)


def get_meeting_deps(
    db: Session = Depends(get_db),
    directory: Directory = Depends(get_directory),
    mailer: Mailer = Depends(get_mailer),
) -> MeetingDeps:
    return MeetingDeps(db, directory, mailer=mailer)
