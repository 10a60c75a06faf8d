"""Meeting requests, their history, slot locks and reminder jobs.

- meet_requests: one row per request; slot columns hold the canonical UTC slot key.
- meet_history: append-only audit trail per request.
- slot_locks: one row per (event, actor, slot) for accepted meetings; the unique key prevents double-booking.
- reminder_jobs: one pending reminder per accepted meeting.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "meet_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("sender_id", sa.String(64), nullable=False),
        sa.Column("sender_role", sa.String(16), nullable=False),
        sa.Column("receiver_id", sa.String(64), nullable=False),
        sa.Column("receiver_role", sa.String(16), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("requested_at", sa.String(20), nullable=False),
        sa.Column("proposed_new_at", sa.String(20), nullable=True),
        sa.Column("accepted_at", sa.String(20), nullable=True),
        sa.Column("status", sa.String(24), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    for col in ("event_id", "sender_id", "receiver_id", "requested_at", "proposed_new_at", "status"):
        op.create_index(f"ix_meet_requests_{col}", "meet_requests", [col], unique=False)

    op.create_table(
        "meet_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("meet_request_id", sa.Integer(), sa.ForeignKey("meet_requests.id"), nullable=False),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("note", sa.String(255), nullable=True),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meet_history_meet_request_id", "meet_history", ["meet_request_id"], unique=False)

    op.create_table(
        "slot_locks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("slot_iso", sa.String(20), nullable=False),
        sa.Column("actor_role", sa.String(16), nullable=True),
        sa.Column("meet_request_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "actor_id", "slot_iso", name="uq_slot_locks_event_actor_slot"),
    )
    for col in ("event_id", "actor_id", "slot_iso"):
        op.create_index(f"ix_slot_locks_{col}", "slot_locks", [col], unique=False)

    op.create_table(
        "reminder_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("meeting_id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=True),
        sa.Column("run_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reminder_jobs_meeting_id", "reminder_jobs", ["meeting_id"], unique=True)
    op.create_index("ix_reminder_jobs_event_id", "reminder_jobs", ["event_id"], unique=False)
    op.create_index("ix_reminder_jobs_run_at", "reminder_jobs", ["run_at"], unique=False)


def downgrade() -> None:
    op.drop_table("reminder_jobs")
    op.drop_table("slot_locks")
    op.drop_table("meet_history")
    op.drop_table("meet_requests")
