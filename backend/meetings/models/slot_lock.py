"""One row == one occupied 30-minute slot for one actor in one event.

Inserted (one per participant) when a request becomes accepted; deleted when that meeting is declined or
cancelled. The composite unique key is what actually prevents double-booking.
"""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from meetings.db.base import Base


class SlotLock(Base):
    __tablename__ = "slot_locks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), nullable=False, index=True)
    actor_id = Column(String(64), nullable=False, index=True)
    slot_iso = Column(String(20), nullable=False, index=True)
    actor_role = Column(String(16), nullable=True)
    meet_request_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("event_id", "actor_id", "slot_iso", name="uq_slot_locks_event_actor_slot"),)
