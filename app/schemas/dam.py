"""Dam and reservoir capacity schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.dam import DamStatus
from app.schemas.alert import AlertRead
from app.schemas.location import GeoPoint
from app.utils.time import ensure_utc


class DamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: GeoPoint
    address: str | None = None
    total_capacity: float = Field(gt=0, allow_inf_nan=False)
    dam_type: str | None = None
    height: float | None = None
    length: float | None = None
    power_capacity: float | None = None
    region: str | None = None
    state: str | None = None
    country: str = "India"
    external_id: str | None = None


class DamRead(BaseModel):
    id: int
    name: str
    location: GeoPoint
    address: str | None
    total_capacity: float
    dam_type: str | None
    height: float | None
    length: float | None
    power_capacity: float | None
    region: str | None
    state: str | None
    country: str
    external_id: str | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DamCapacityCreate(BaseModel):
    dam_id: int = Field(gt=0)
    storage: float = Field(ge=0, allow_inf_nan=False)
    inflow_rate: float | None = Field(default=None, allow_inf_nan=False)
    outflow_rate: float | None = Field(default=None, allow_inf_nan=False)
    power_generation: float | None = Field(default=None, allow_inf_nan=False)
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class DamCapacityRead(BaseModel):
    id: int
    dam_id: int
    storage: float
    capacity: float
    percentage: float
    inflow_rate: float | None
    outflow_rate: float | None
    power_generation: float | None
    status: DamStatus
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentCapacityRead(BaseModel):
    dam: DamRead
    storage: float | None
    capacity: float
    percentage: float
    inflow_rate: float | None = None
    outflow_rate: float | None = None
    power_generation: float | None = None
    status: DamStatus
    timestamp: datetime | None = None
    message: str | None = None


class OverflowReadingRead(BaseModel):
    dam: DamRead
    storage: float
    capacity: float
    percentage: float
    status: DamStatus
    timestamp: datetime


class DamCapacityIngestResult(BaseModel):
    reading: DamCapacityRead
    alerts: list[AlertRead]
