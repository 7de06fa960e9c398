"""Groundwater wells and depth readings."""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class GroundwaterWell(Base):
    """An observation well."""

    __tablename__ = "groundwater_wells"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    location: Mapped[dict] = mapped_column(JSON, nullable=False)
    depth_total: Mapped[float | None] = mapped_column(Float, nullable=True)
    aquifer_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(80), nullable=False, default="India")
    external_id: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    depths = relationship("GroundwaterDepth", back_populates="well", cascade="all, delete-orphan")


class GroundwaterDepth(Base):
    """Depth to water table (metres below ground level)."""

    __tablename__ = "groundwater_depths"
    __table_args__ = (Index("ix_groundwater_depths_well_timestamp", "well_id", "timestamp"),)

    well_id: Mapped[int] = mapped_column(ForeignKey("groundwater_wells.id", ondelete="CASCADE"), nullable=False)
    depth: Mapped[float] = mapped_column(Float, nullable=False)
    season: Mapped[str | None] = mapped_column(String(40), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    well = relationship("GroundwaterWell", back_populates="depths")
