"""
Single source of truth for database tables that exist after migrations (001).

Use these names when writing raw SQL (e.g. TRUNCATE). Must match models and alembic/versions.
"""
ALL_TABLE_NAMES = (
    "meet_requests",
    "meet_history",
    "slot_locks",
    "reminder_jobs",
)
