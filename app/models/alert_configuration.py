"""User-defined threshold alert configurations."""
from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, Enum as SqlEnum, Float, ForeignKey, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AlertType(str, Enum):
    """Kinds of monitored entity an alert can watch."""

    RIVER = "river"
    DAM = "dam"
    GROUNDWATER = "groundwater"
    RAINFALL = "rainfall"


class ThresholdOperator(str, Enum):
    GT = "gt"
    LT = "lt"
    EQ = "eq"


class NotificationChannel(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    PUSH = "push"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class AlertConfiguration(Base):
    """Rule telling the evaluator when a reading on an entity should open an alert."""

    __tablename__ = "alert_configurations"
    __table_args__ = (
        Index("ix_alert_configurations_entity", "entity_type", "entity_id", "enabled"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    entity_type: Mapped[AlertType] = mapped_column(
        SqlEnum(AlertType, name="alert_type", values_callable=_enum_values), nullable=False
    )
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    threshold_operator: Mapped[ThresholdOperator] = mapped_column(
        SqlEnum(ThresholdOperator, name="threshold_operator", values_callable=_enum_values), nullable=False
    )
    threshold_value: Mapped[float] = mapped_column(Float, nullable=False)
    channels: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="alert_configurations")
    alerts = relationship("Alert", back_populates="configuration", passive_deletes=True)
