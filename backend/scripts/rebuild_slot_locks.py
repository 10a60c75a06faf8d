#!/usr/bin/env python3
"""
Rebuild slot_locks from accepted meetings (all events, or one with --event).
Run with backend stopped: cd backend && python scripts/rebuild_slot_locks.py [--event EVENT_ID]
"""
import argparse
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from meetings.db.session import SessionLocal
from meetings.services.scheduling.ledger import rebuild_locks


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--event", default=None, help="Only this event id")
    args = parser.parse_args()
    db = SessionLocal()
    try:
        count = rebuild_locks(db, args.event)
        db.commit()
    finally:
        db.close()
    print(f"Done. {count} slot locks written.")


if __name__ == "__main__":
    main()
