"""Rainfall schemas."""
from __future__ import annotations

from datetime import date as date_type, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.alert import AlertRead
from app.schemas.location import GeoPoint


class RainfallStationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: GeoPoint
    region: str | None = None
    state: str | None = None
    country: str = "India"
    external_id: str | None = None


class RainfallStationRead(BaseModel):
    id: int
    name: str
    location: GeoPoint
    region: str | None
    state: str | None
    country: str
    external_id: str | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RainfallReadingCreate(BaseModel):
    station_id: int = Field(gt=0)
    rainfall: float = Field(ge=0, allow_inf_nan=False)
    date: date_type


class RainfallReadingRead(BaseModel):
    id: int
    station_id: int
    rainfall: float
    date: date_type

    model_config = ConfigDict(from_attributes=True)


class SeasonTotals(BaseModel):
    total: float = 0.0
    days: int = 0
    average: float = 0.0


class SeasonalAnalysis(BaseModel):
    station: RainfallStationRead
    year: int
    seasonal: dict[str, SeasonTotals]


class RiskIndicators(BaseModel):
    region: str
    average_rainfall: float
    drought_risk: str
    flood_risk: str
    period_days: int


class RainfallIngestResult(BaseModel):
    reading: RainfallReadingRead
    alerts: list[AlertRead]
