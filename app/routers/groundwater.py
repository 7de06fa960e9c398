"""Groundwater endpoints."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.groundwater import GroundwaterDepth, GroundwaterWell
from app.schemas.alert import AlertRead
from app.schemas.groundwater import (
    CurrentDepthRead,
    DepthCreate,
    DepthIngestResult,
    DepthRead,
    HeatmapPoint,
    RegionalWellRead,
    WellCreate,
    WellRead,
)
from app.security import require_api_key, require_scope
from app.services import groundwater as groundwater_service
from app.utils.audit import actor_from_api_key

router = APIRouter(prefix="/groundwater", tags=["groundwater"], dependencies=[Depends(require_api_key)])


@router.get("/wells", response_model=list[WellRead])
def list_wells(db: Session = Depends(get_db)) -> list[GroundwaterWell]:
    return groundwater_service.list_wells(db)


@router.post("/wells", response_model=WellRead, status_code=status.HTTP_201_CREATED)
def create_well(
    payload: WellCreate,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> GroundwaterWell:
    return groundwater_service.create_well(db, payload, actor=actor_from_api_key(api_key, fallback="apikey:unknown"))


@router.get("/wells/{well_id}", response_model=WellRead)
def get_well(well_id: int, db: Session = Depends(get_db)) -> GroundwaterWell:
    return groundwater_service.get_well(db, well_id)


@router.get("/wells/{well_id}/depth", response_model=CurrentDepthRead)
def get_current_depth(well_id: int, db: Session = Depends(get_db)) -> dict:
    return groundwater_service.get_current_depth(db, well_id)


@router.get("/wells/{well_id}/depth/history", response_model=list[DepthRead])
def get_depth_history(
    well_id: int,
    start: datetime | None = Query(default=None, alias="start_date"),
    end: datetime | None = Query(default=None, alias="end_date"),
    limit: int = Query(default=groundwater_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[GroundwaterDepth]:
    return groundwater_service.get_depth_history(db, well_id, start=start, end=end, limit=limit)


@router.get("/regions/{region}", response_model=list[RegionalWellRead])
def regional_depths(region: str, db: Session = Depends(get_db)) -> list[dict]:
    return groundwater_service.regional_depths(db, region)


@router.get("/heatmap", response_model=list[HeatmapPoint])
def heatmap(region: str | None = Query(default=None), db: Session = Depends(get_db)) -> list[dict]:
    return groundwater_service.heatmap(db, region)


@router.post(
    "/depths",
    response_model=DepthIngestResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope({ApiScope.operator}))],
)
def record_depth(payload: DepthCreate, db: Session = Depends(get_db)) -> DepthIngestResult:
    reading, triggered = groundwater_service.record_depth(db, payload)
    return DepthIngestResult(
        reading=DepthRead.model_validate(reading),
        alerts=[AlertRead.model_validate(item.alert) for item in triggered],
    )
