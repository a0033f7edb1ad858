"""Initial EventGate schema."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create events, reports and transparency_log tables."""
    op.create_table(
        "events",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("city", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("source_url", sa.String(length=2048), nullable=False),
        sa.Column("organizer", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_events_status"
        ),
        sa.CheckConstraint(
            "NOT verified OR status = 'approved'", name="ck_events_verified_approved"
        ),
    )
    op.create_index("idx_events_status_date", "events", ["status", "date"])
    op.create_index("idx_events_status_created", "events", ["status", "created_at"])
    op.create_index("idx_events_created_by", "events", ["created_by"])

    op.create_table(
        "reports",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("event_id", sa.String(length=64), nullable=False),
        sa.Column("reporter_id", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_reports_event", "reports", ["event_id", "created_at"])

    op.create_table(
        "transparency_log",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("event_id", sa.String(length=64), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("moderator_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "action IN ('rejected', 'removed')", name="ck_transparency_action"
        ),
    )
    op.create_index("idx_transparency_created", "transparency_log", ["created_at"])
    op.create_index("idx_transparency_event", "transparency_log", ["event_id"])


def downgrade() -> None:
    """Drop EventGate tables."""
    op.drop_index("idx_transparency_event", table_name="transparency_log")
    op.drop_index("idx_transparency_created", table_name="transparency_log")
    op.drop_table("transparency_log")

    op.drop_index("idx_reports_event", table_name="reports")
    op.drop_table("reports")

    op.drop_index("idx_events_created_by", table_name="events")
    op.drop_index("idx_events_status_created", table_name="events")
    op.drop_index("idx_events_status_date", table_name="events")
    op.drop_table("events")
