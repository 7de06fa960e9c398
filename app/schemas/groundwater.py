"""Groundwater well schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.alert import AlertRead
from app.schemas.location import GeoPoint
from app.utils.time import ensure_utc


class WellCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: GeoPoint
    depth_total: float | None = Field(default=None, gt=0)
    aquifer_type: str | None = None
    region: str | None = None
    state: str | None = None
    country: str = "India"
    external_id: str | None = None


class WellRead(BaseModel):
    id: int
    name: str
    location: GeoPoint
    depth_total: float | None
    aquifer_type: str | None
    region: str | None
    state: str | None
    country: str
    external_id: str | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DepthCreate(BaseModel):
    well_id: int = Field(gt=0)
    depth: float = Field(allow_inf_nan=False)
    season: str | None = Field(default=None, max_length=40)
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class DepthRead(BaseModel):
    id: int
    well_id: int
    depth: float
    season: str | None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentDepthRead(BaseModel):
    well: WellRead
    depth: float | None
    timestamp: datetime | None = None
    season: str | None = None
    message: str | None = None


class LatestDepth(BaseModel):
    depth: float
    timestamp: datetime


class RegionalWellRead(BaseModel):
    well: WellRead
    latest_depth: LatestDepth | None


class HeatmapPoint(BaseModel):
    id: int
    name: str
    location: GeoPoint
    depth: float | None
    timestamp: datetime | None


class DepthIngestResult(BaseModel):
    reading: DepthRead
    alerts: list[AlertRead]
