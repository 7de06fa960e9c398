"""River gauge stations and their level readings."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, Float, ForeignKey, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RiverLevelStatus(str, Enum):
    """Flood-risk buckets, least to most severe."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"


class Station(Base):
    """A river gauge station with its danger and flood marks."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    river_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    location: Mapped[dict] = mapped_column(JSON, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    danger_level: Mapped[float] = mapped_column(Float, nullable=False)
    flood_level: Mapped[float] = mapped_column(Float, nullable=False)
    elevation: Mapped[float | None] = mapped_column(Float, nullable=True)
    basin: Mapped[str | None] = mapped_column(String(120), nullable=True)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(80), nullable=False, default="India")
    external_id: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    levels = relationship("RiverLevel", back_populates="station", cascade="all, delete-orphan")


class RiverLevel(Base):
    """A single water-level reading at a station."""

    __tablename__ = "river_levels"
    __table_args__ = (Index("ix_river_levels_station_timestamp", "station_id", "timestamp"),)

    station_id: Mapped[int] = mapped_column(ForeignKey("stations.id", ondelete="CASCADE"), nullable=False)
    level: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[RiverLevelStatus] = mapped_column(
        SqlEnum(RiverLevelStatus, name="river_level_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RiverLevelStatus.SAFE,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    station = relationship("Station", back_populates="levels")
