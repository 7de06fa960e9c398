"""River tracker endpoints."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.river import RiverLevel, Station
from app.schemas.alert import AlertRead
from app.schemas.river import (
    CriticalLevelRead,
    CurrentLevelRead,
    RiverLevelCreate,
    RiverLevelIngestResult,
    RiverLevelRead,
    StationCreate,
    StationRead,
)
from app.security import require_api_key, require_scope
from app.services import river as river_service
from app.utils.audit import actor_from_api_key

router = APIRouter(prefix="/river", tags=["river"], dependencies=[Depends(require_api_key)])


@router.get("/stations", response_model=list[StationRead])
def list_stations(db: Session = Depends(get_db)) -> list[Station]:
    return river_service.list_stations(db)


@router.post("/stations", response_model=StationRead, status_code=status.HTTP_201_CREATED)
def create_station(
    payload: StationCreate,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> Station:
    return river_service.create_station(db, payload, actor=actor_from_api_key(api_key, fallback="apikey:unknown"))


@router.get("/stations/{station_id}", response_model=StationRead)
def get_station(station_id: int, db: Session = Depends(get_db)) -> Station:
    return river_service.get_station(db, station_id)


@router.get("/stations/{station_id}/current", response_model=CurrentLevelRead)
def get_current_level(station_id: int, db: Session = Depends(get_db)) -> dict:
    return river_service.get_current_level(db, station_id)


@router.get("/stations/{station_id}/levels", response_model=list[RiverLevelRead])
def get_level_history(
    station_id: int,
    start: datetime | None = Query(default=None, alias="start_date"),
    end: datetime | None = Query(default=None, alias="end_date"),
    limit: int = Query(default=river_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[RiverLevel]:
    return river_service.get_level_history(db, station_id, start=start, end=end, limit=limit)


@router.get("/rivers/{river_name}", response_model=list[StationRead])
def stations_by_river(river_name: str, db: Session = Depends(get_db)) -> list[Station]:
    return river_service.stations_by_river(db, river_name)


@router.get("/regions/{region}", response_model=list[StationRead])
def stations_by_region(region: str, db: Session = Depends(get_db)) -> list[Station]:
    return river_service.stations_by_region(db, region)


@router.get("/alerts", response_model=list[CriticalLevelRead])
def critical_levels(db: Session = Depends(get_db)) -> list[dict]:
    """Critical readings from the last 24 hours."""

    return river_service.critical_levels(db)


@router.post(
    "/levels",
    response_model=RiverLevelIngestResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope({ApiScope.operator}))],
)
def record_level(payload: RiverLevelCreate, db: Session = Depends(get_db)) -> RiverLevelIngestResult:
    reading, triggered = river_service.record_level(db, payload)
    return RiverLevelIngestResult(
        reading=RiverLevelRead.model_validate(reading),
        alerts=[AlertRead.model_validate(item.alert) for item in triggered],
    )
