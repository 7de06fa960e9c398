"""River gauge schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.river import RiverLevelStatus
from app.schemas.alert import AlertRead
from app.schemas.location import GeoPoint
from app.utils.time import ensure_utc


class StationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    river_name: str = Field(min_length=1, max_length=200)
    location: GeoPoint
    address: str | None = None
    danger_level: float = Field(allow_inf_nan=False)
    flood_level: float = Field(allow_inf_nan=False)
    elevation: float | None = None
    basin: str | None = None
    region: str | None = None
    state: str | None = None
    country: str = "India"
    external_id: str | None = None

    @model_validator(mode="after")
    def _flood_above_danger(self) -> "StationCreate":
        if self.flood_level < self.danger_level:
            raise ValueError("flood_level must be greater than or equal to danger_level")
        return self


class StationRead(BaseModel):
    id: int
    name: str
    river_name: str
    location: GeoPoint
    address: str | None
    danger_level: float
    flood_level: float
    elevation: float | None
    basin: str | None
    region: str | None
    state: str | None
    country: str
    external_id: str | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RiverLevelCreate(BaseModel):
    station_id: int = Field(gt=0)
    level: float = Field(allow_inf_nan=False)
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class RiverLevelRead(BaseModel):
    id: int
    station_id: int
    level: float
    status: RiverLevelStatus
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentLevelRead(BaseModel):
    station: StationRead
    level: float | None
    status: RiverLevelStatus
    timestamp: datetime | None = None
    message: str | None = None


class CriticalLevelRead(BaseModel):
    station: StationRead
    level: float
    status: RiverLevelStatus
    timestamp: datetime


class RiverLevelIngestResult(BaseModel):
    reading: RiverLevelRead
    alerts: list[AlertRead]
