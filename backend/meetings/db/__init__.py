from meetings.db.base import Base
from meetings.db.session import get_db, engine, SessionLocal
from meetings.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
