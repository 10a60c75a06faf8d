"""Shared fixtures: in-memory database, static directory and recording side-effect channels."""
from datetime import date, datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import meetings.models  # noqa: F401  registers tables on Base.metadata
from meetings.core.constants import MEETING_ROLES
from meetings.db.base import Base
from meetings.services.deps import MeetingDeps
from meetings.services.directory.memory import build_static_directory
from meetings.services.directory.registry import Directory
from meetings.services.directory.types import ActorIdentity, ActorRef, EventBounds

EVENT_ID = "expo-2030"
EVENT_START = datetime(2030, 11, 3, 9, 0, tzinfo=timezone.utc)
EVENT_END = datetime(2030, 11, 5, 17, 0, tzinfo=timezone.utc)

ALICE = ActorRef("a-1", "attendee")
BOB = ActorRef("e-1", "exhibitor")
CAROL = ActorRef("a-2", "attendee")
DAVE = ActorRef("s-1", "speaker")
ERIN = ActorRef("a-3", "attendee")
ADMIN = ActorRef("admin-1", "admin")


def make_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)()


class RecordingMailer:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail

    def __call__(self, to_email: str, subject: str, html_body: str) -> bool:
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((to_email, subject, html_body))
        return True

    def subjects(self) -> list[str]:
        return [s for _, s, _ in self.sent]


class BrokenReminders:
    """Scheduling capability whose every call fails."""

    def schedule(self, at, key, payload):
        raise RuntimeError("scheduler unavailable")

    def cancel(self, key):
        raise RuntimeError("scheduler unavailable")

    def list_due(self, now):
        raise RuntimeError("scheduler unavailable")


def add_actor(
    directory: Directory,
    actor: ActorRef,
    *,
    open_to_meetings: bool = True,
    available_days: tuple[date, ...] = (),
) -> None:
    directory.get_adapter(actor.role).add(
        actor.id,
        ActorIdentity(
            email=f"{actor.id}@example.com",
            display_name=f"User {actor.id}",
            open_to_meetings=open_to_meetings,
            available_days=available_days,
        ),
    )


def make_directory(events: list[EventBounds] | None = None) -> Directory:
    directory = build_static_directory(
        MEETING_ROLES,
        events if events is not None else [EventBounds(EVENT_ID, EVENT_START, EVENT_END, "Expo 2030")],
    )
    for actor in (ALICE, BOB, CAROL, DAVE, ERIN):
        add_actor(directory, actor)
    return directory


def make_deps(db=None, directory=None, mailer=None, reminders=None) -> MeetingDeps:
    return MeetingDeps(
        db if db is not None else make_session(),
        directory if directory is not None else make_directory(),
        mailer=mailer if mailer is not None else RecordingMailer(),
        reminders=reminders,
    )


def make_file_sessionmaker(path: str):
    """Sessions on a file-backed SQLite database; each session gets its own connection."""
    engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False, "timeout": 30})
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)
