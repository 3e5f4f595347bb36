"""Create event and audit log tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organizer_id", sa.Integer(), nullable=False),
        sa.Column("title_de", sa.String(length=512), nullable=False),
        sa.Column("title_en", sa.String(length=512), nullable=False),
        sa.Column("description_de", sa.Text(), nullable=True),
        sa.Column("description_en", sa.Text(), nullable=True),
        sa.Column("start_date_time", sa.DateTime(), nullable=False),
        sa.Column("end_date_time", sa.DateTime(), nullable=True),
        sa.Column("event_url", sa.String(length=1024), nullable=True),
        sa.Column("location", sa.String(length=512), nullable=True),
        sa.Column("publish_app", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("publish_newsletter", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("publish_in_ical", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organizer_id"], ["organizers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_organizer_id"), "events", ["organizer_id"], unique=False)

    # No foreign keys on event_id/organizer_id: entries outlive the event.
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("organizer_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("type", sa.Enum("CREATE", "UPDATE", "DELETE", name="audit_type"), nullable=False),
        sa.Column("at", sa.DateTime(), nullable=False),
        sa.Column("old_data", sa.JSON(), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_log_event_id"), "audit_log", ["event_id"], unique=False)
    op.create_index(op.f("ix_audit_log_organizer_id"), "audit_log", ["organizer_id"], unique=False)
    op.create_index(op.f("ix_audit_log_user_id"), "audit_log", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_audit_log_user_id"), table_name="audit_log")
    op.drop_index(op.f("ix_audit_log_organizer_id"), table_name="audit_log")
    op.drop_index(op.f("ix_audit_log_event_id"), table_name="audit_log")
    op.drop_table("audit_log")
    sa.Enum(name="audit_type").drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f("ix_events_organizer_id"), table_name="events")
    op.drop_table("events")
