"""Alert model."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.utils.time import utcnow

from .alert_configuration import AlertType, _enum_values
from .base import Base

OPEN_ALERT_INDEX = "uq_alerts_open_configuration"


class AlertSeverity(str, Enum):
    """Severity levels. EMERGENCY is accepted by storage but never produced by the evaluator."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    EMERGENCY = "emergency"


class Alert(Base):
    """A triggered threshold condition."""

    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_triggered_at", "triggered_at"),
        Index(
            OPEN_ALERT_INDEX,
            "configuration_id",
            unique=True,
            sqlite_where=text("resolved_at IS NULL"),
            postgresql_where=text("resolved_at IS NULL"),
        ),
    )

    configuration_id: Mapped[int | None] = mapped_column(
        ForeignKey("alert_configurations.id", ondelete="SET NULL"), nullable=True
    )
    entity_type: Mapped[AlertType] = mapped_column(
        SqlEnum(AlertType, name="alert_type", values_callable=_enum_values), nullable=False
    )
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_name: Mapped[str] = mapped_column(String(200), nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        SqlEnum(AlertSeverity, name="alert_severity", values_callable=_enum_values), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    triggered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    acknowledged_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    configuration = relationship("AlertConfiguration", back_populates="alerts")

    @property
    def is_open(self) -> bool:
        return self.resolved_at is None
