"""Deferred reminder for an accepted meeting. One row per meeting: scheduling again replaces run_at/payload."""
from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from meetings.db.base import Base


class ReminderJob(Base):
    __tablename__ = "reminder_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meeting_id = Column(Integer, nullable=False, unique=True, index=True)
    event_id = Column(String(64), nullable=True, index=True)  # for the admin listing
    run_at = Column(DateTime(timezone=True), nullable=False, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
