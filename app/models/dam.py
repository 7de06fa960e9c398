"""Dams and their storage readings."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SqlEnum,
    Float,
    ForeignKey,
    Index,
    JSON,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class DamStatus(str, Enum):
    """Reservoir fill buckets."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERFLOW = "overflow"


class Dam(Base):
    """A dam and its reservoir capacity."""

    __tablename__ = "dams"
    __table_args__ = (CheckConstraint("total_capacity > 0", name="ck_dams_positive_capacity"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    location: Mapped[dict] = mapped_column(JSON, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_capacity: Mapped[float] = mapped_column(Float, nullable=False)
    dam_type: Mapped[str | None] = mapped_column(String(80), nullable=True)
    height: Mapped[float | None] = mapped_column(Float, nullable=True)
    length: Mapped[float | None] = mapped_column(Float, nullable=True)
    power_capacity: Mapped[float | None] = mapped_column(Float, nullable=True)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(80), nullable=False, default="India")
    external_id: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    capacities = relationship("DamCapacity", back_populates="dam", cascade="all, delete-orphan")


class DamCapacity(Base):
    """A storage reading for a dam, with its fill percentage at ingestion time."""

    __tablename__ = "dam_capacities"
    __table_args__ = (Index("ix_dam_capacities_dam_timestamp", "dam_id", "timestamp"),)

    dam_id: Mapped[int] = mapped_column(ForeignKey("dams.id", ondelete="CASCADE"), nullable=False)
    storage: Mapped[float] = mapped_column(Float, nullable=False)
    capacity: Mapped[float] = mapped_column(Float, nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)
    inflow_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    outflow_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    power_generation: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[DamStatus] = mapped_column(
        SqlEnum(DamStatus, name="dam_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DamStatus.NORMAL,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    dam = relationship("Dam", back_populates="capacities")
