"""Meeting request between two event participants, plus its append-only audit trail.

Slot columns hold the canonical slot key (YYYY-MM-DDTHH:MM:SSZ, 30-min aligned UTC) so equality and range
filters behave the same on Postgres and SQLite. Rows are never deleted: declined/cancelled are terminal statuses.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from meetings.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MeetRequest(Base):
    __tablename__ = "meet_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), nullable=False, index=True)
    sender_id = Column(String(64), nullable=False, index=True)
    sender_role = Column(String(16), nullable=False)
    receiver_id = Column(String(64), nullable=False, index=True)
    receiver_role = Column(String(16), nullable=False)

    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)

    requested_at = Column(String(20), nullable=False, index=True)
    proposed_new_at = Column(String(20), nullable=True, index=True)  # set while status = reschedule-proposed
    accepted_at = Column(String(20), nullable=True)  # finalized slot
    status = Column(String(24), nullable=False, default="pending", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    history = relationship(
        "MeetHistory",
        order_by="MeetHistory.id",
        back_populates="meet_request",
        lazy="selectin",
    )


class MeetHistory(Base):
    __tablename__ = "meet_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meet_request_id = Column(Integer, ForeignKey("meet_requests.id"), nullable=False, index=True)
    actor_id = Column(String(64), nullable=False)
    action = Column(String(32), nullable=False)  # sent | accepted | proposed | declined | cancelled
    note = Column(String(255), nullable=True)  # slot key or previous status
    at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    meet_request = relationship("MeetRequest", back_populates="history")
