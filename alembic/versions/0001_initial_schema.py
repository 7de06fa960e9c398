"""initial HydroWatch schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    "apiscope": ("viewer", "operator", "admin"),
    "river_level_status": ("safe", "warning", "danger", "critical"),
    "dam_status": ("normal", "warning", "critical", "overflow"),
    "alert_type": ("river", "dam", "groundwater", "rainfall"),
    "threshold_operator": ("gt", "lt", "eq"),
    "alert_severity": ("info", "warning", "critical", "emergency"),
    "notification_channel": ("sms", "email", "push"),
    "notification_status": ("pending", "sent", "failed"),
}


def _enum(name: str) -> sa.Enum:
    values = ENUMS[name]
    # Types are created once up front; tables must not re-create them on PostgreSQL.
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), "postgresql"
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "api_keys",
        *_timestamps(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("prefix", sa.String(length=32), nullable=False),
        sa.Column("key_hash", sa.String(length=128), nullable=False),
        sa.Column("scope", _enum("apiscope"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("key_hash"),
    )
    op.create_index("ix_api_keys_prefix", "api_keys", ["prefix"], unique=False)
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"], unique=False)

    op.create_table(
        "audit_logs",
        *_timestamps(),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("data_json", sa.JSON(), nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_at", "audit_logs", ["at"], unique=False)

    op.create_table(
        "scheduler_locks",
        *_timestamps(),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "stations",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("river_name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("danger_level", sa.Float(), nullable=False),
        sa.Column("flood_level", sa.Float(), nullable=False),
        sa.Column("elevation", sa.Float(), nullable=True),
        sa.Column("basin", sa.String(length=120), nullable=True),
        sa.Column("region", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=False),
        sa.Column("external_id", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_stations_name", "stations", ["name"], unique=False)
    op.create_index("ix_stations_river_name", "stations", ["river_name"], unique=False)
    op.create_index("ix_stations_region", "stations", ["region"], unique=False)

    op.create_table(
        "river_levels",
        *_timestamps(),
        sa.Column("station_id", sa.Integer(), sa.ForeignKey("stations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("level", sa.Float(), nullable=False),
        sa.Column("status", _enum("river_level_status"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_river_levels_station_timestamp", "river_levels", ["station_id", "timestamp"], unique=False
    )

    op.create_table(
        "dams",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("total_capacity", sa.Float(), nullable=False),
        sa.Column("dam_type", sa.String(length=80), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("length", sa.Float(), nullable=True),
        sa.Column("power_capacity", sa.Float(), nullable=True),
        sa.Column("region", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=False),
        sa.Column("external_id", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("total_capacity > 0", name="ck_dams_positive_capacity"),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_dams_name", "dams", ["name"], unique=False)
    op.create_index("ix_dams_region", "dams", ["region"], unique=False)

    op.create_table(
        "dam_capacities",
        *_timestamps(),
        sa.Column("dam_id", sa.Integer(), sa.ForeignKey("dams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("storage", sa.Float(), nullable=False),
        sa.Column("capacity", sa.Float(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.Column("inflow_rate", sa.Float(), nullable=True),
        sa.Column("outflow_rate", sa.Float(), nullable=True),
        sa.Column("power_generation", sa.Float(), nullable=True),
        sa.Column("status", _enum("dam_status"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_dam_capacities_dam_timestamp", "dam_capacities", ["dam_id", "timestamp"], unique=False
    )

    op.create_table(
        "groundwater_wells",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.JSON(), nullable=False),
        sa.Column("depth_total", sa.Float(), nullable=True),
        sa.Column("aquifer_type", sa.String(length=120), nullable=True),
        sa.Column("region", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=False),
        sa.Column("external_id", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_groundwater_wells_name", "groundwater_wells", ["name"], unique=False)
    op.create_index("ix_groundwater_wells_region", "groundwater_wells", ["region"], unique=False)

    op.create_table(
        "groundwater_depths",
        *_timestamps(),
        sa.Column(
            "well_id", sa.Integer(), sa.ForeignKey("groundwater_wells.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("depth", sa.Float(), nullable=False),
        sa.Column("season", sa.String(length=40), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_groundwater_depths_well_timestamp", "groundwater_depths", ["well_id", "timestamp"], unique=False
    )

    op.create_table(
        "rainfall_stations",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location", sa.JSON(), nullable=False),
        sa.Column("region", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=False),
        sa.Column("external_id", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_rainfall_stations_name", "rainfall_stations", ["name"], unique=False)
    op.create_index("ix_rainfall_stations_region", "rainfall_stations", ["region"], unique=False)

    op.create_table(
        "rainfall_data",
        *_timestamps(),
        sa.Column(
            "station_id",
            sa.Integer(),
            sa.ForeignKey("rainfall_stations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rainfall", sa.Float(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.UniqueConstraint("station_id", "date", name="uq_rainfall_data_station_date"),
    )
    op.create_index("ix_rainfall_data_station_id", "rainfall_data", ["station_id"], unique=False)

    op.create_table(
        "alert_configurations",
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("entity_type", _enum("alert_type"), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("threshold_operator", _enum("threshold_operator"), nullable=False),
        sa.Column("threshold_value", sa.Float(), nullable=False),
        sa.Column("channels", sa.JSON(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_alert_configurations_user_id", "alert_configurations", ["user_id"], unique=False)
    op.create_index(
        "ix_alert_configurations_entity",
        "alert_configurations",
        ["entity_type", "entity_id", "enabled"],
        unique=False,
    )

    op.create_table(
        "alerts",
        *_timestamps(),
        sa.Column(
            "configuration_id",
            sa.Integer(),
            sa.ForeignKey("alert_configurations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("entity_type", _enum("alert_type"), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("entity_name", sa.String(length=200), nullable=False),
        sa.Column("severity", _enum("alert_severity"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("triggered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), nullable=False),
        sa.Column("acknowledged_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_alerts_triggered_at", "alerts", ["triggered_at"], unique=False)
    op.create_index("ix_alerts_entity_id", "alerts", ["entity_id"], unique=False)

    op.create_table(
        "notifications",
        *_timestamps(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("alert_id", sa.Integer(), sa.ForeignKey("alerts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("channel", _enum("notification_channel"), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", _enum("notification_status"), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)
    op.create_index("ix_notifications_status", "notifications", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_notifications_status", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_alerts_entity_id", table_name="alerts")
    op.drop_index("ix_alerts_triggered_at", table_name="alerts")
    op.drop_table("alerts")

    op.drop_index("ix_alert_configurations_entity", table_name="alert_configurations")
    op.drop_index("ix_alert_configurations_user_id", table_name="alert_configurations")
    op.drop_table("alert_configurations")

    op.drop_index("ix_rainfall_data_station_id", table_name="rainfall_data")
    op.drop_table("rainfall_data")
    op.drop_index("ix_rainfall_stations_region", table_name="rainfall_stations")
    op.drop_index("ix_rainfall_stations_name", table_name="rainfall_stations")
    op.drop_table("rainfall_stations")

    op.drop_index("ix_groundwater_depths_well_timestamp", table_name="groundwater_depths")
    op.drop_table("groundwater_depths")
    op.drop_index("ix_groundwater_wells_region", table_name="groundwater_wells")
    op.drop_index("ix_groundwater_wells_name", table_name="groundwater_wells")
    op.drop_table("groundwater_wells")

    op.drop_index("ix_dam_capacities_dam_timestamp", table_name="dam_capacities")
    op.drop_table("dam_capacities")
    op.drop_index("ix_dams_region", table_name="dams")
    op.drop_index("ix_dams_name", table_name="dams")
    op.drop_table("dams")

    op.drop_index("ix_river_levels_station_timestamp", table_name="river_levels")
    op.drop_table("river_levels")
    op.drop_index("ix_stations_region", table_name="stations")
    op.drop_index("ix_stations_river_name", table_name="stations")
    op.drop_index("ix_stations_name", table_name="stations")
    op.drop_table("stations")

    op.drop_table("scheduler_locks")
    op.drop_index("ix_audit_logs_at", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_api_keys_user_id", table_name="api_keys")
    op.drop_index("ix_api_keys_prefix", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_table("users")

    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).drop(bind, checkfirst=True)
