"""Add analytics counters."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_analytics_counters"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create analytics table."""
    op.create_table(
        "analytics",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    """Drop analytics table."""
    op.drop_table("analytics")
