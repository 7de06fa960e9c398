"""Rainfall stations and daily totals."""
from datetime import date as date_type

from sqlalchemy import Boolean, Date, Float, ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RainfallStation(Base):
    """A rain gauge."""

    __tablename__ = "rainfall_stations"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    location: Mapped[dict] = mapped_column(JSON, nullable=False)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(80), nullable=False, default="India")
    external_id: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    readings = relationship("RainfallData", back_populates="station", cascade="all, delete-orphan")


class RainfallData(Base):
    """Rainfall total (mm) for one station and day."""

    __tablename__ = "rainfall_data"
    __table_args__ = (UniqueConstraint("station_id", "date", name="uq_rainfall_data_station_date"),)

    station_id: Mapped[int] = mapped_column(
        ForeignKey("rainfall_stations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rainfall: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)

    station = relationship("RainfallStation", back_populates="readings")
