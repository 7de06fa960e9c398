"""Allow at most one open alert per alert configuration."""

from alembic import op

# revision identifiers, used by Alembic.
revision = "0002_unique_open_alert"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_alerts_open_configuration
    ON alerts(configuration_id)
    WHERE resolved_at IS NULL
    """
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS uq_alerts_open_configuration")
