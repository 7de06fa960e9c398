"""Rainfall endpoints."""
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.rainfall import RainfallData, RainfallStation
from app.schemas.alert import AlertRead
from app.schemas.rainfall import (
    RainfallIngestResult,
    RainfallReadingCreate,
    RainfallReadingRead,
    RainfallStationCreate,
    RainfallStationRead,
    RiskIndicators,
    SeasonalAnalysis,
)
from app.security import require_api_key, require_scope
from app.services import rainfall as rainfall_service
from app.utils.audit import actor_from_api_key

router = APIRouter(prefix="/rainfall", tags=["rainfall"], dependencies=[Depends(require_api_key)])


@router.get("/stations", response_model=list[RainfallStationRead])
def list_stations(db: Session = Depends(get_db)) -> list[RainfallStation]:
    return rainfall_service.list_stations(db)


@router.post("/stations", response_model=RainfallStationRead, status_code=status.HTTP_201_CREATED)
def create_station(
    payload: RainfallStationCreate,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> RainfallStation:
    return rainfall_service.create_station(db, payload, actor=actor_from_api_key(api_key, fallback="apikey:unknown"))


@router.get("/stations/{station_id}", response_model=RainfallStationRead)
def get_station(station_id: int, db: Session = Depends(get_db)) -> RainfallStation:
    return rainfall_service.get_station(db, station_id)


@router.get("/stations/{station_id}/history", response_model=list[RainfallReadingRead])
def get_history(
    station_id: int,
    start: date | None = Query(default=None, alias="start_date"),
    end: date | None = Query(default=None, alias="end_date"),
    limit: int = Query(default=rainfall_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[RainfallData]:
    return rainfall_service.get_history(db, station_id, start=start, end=end, limit=limit)


@router.get("/stations/{station_id}/seasonal", response_model=SeasonalAnalysis)
def seasonal_analysis(
    station_id: int,
    year: int | None = Query(default=None, ge=1900, le=2100),
    db: Session = Depends(get_db),
) -> dict:
    return rainfall_service.seasonal_analysis(db, station_id, year)


@router.get("/risk-indicators", response_model=RiskIndicators)
def risk_indicators(region: str | None = Query(default=None), db: Session = Depends(get_db)) -> dict:
    return rainfall_service.risk_indicators(db, region)


@router.post(
    "/readings",
    response_model=RainfallIngestResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope({ApiScope.operator}))],
)
def record_reading(payload: RainfallReadingCreate, db: Session = Depends(get_db)) -> RainfallIngestResult:
    reading, triggered = rainfall_service.record_reading(db, payload)
    return RainfallIngestResult(
        reading=RainfallReadingRead.model_validate(reading),
        alerts=[AlertRead.model_validate(item.alert) for item in triggered],
    )
