"""Dams dashboard endpoints."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.dam import Dam, DamCapacity
from app.schemas.alert import AlertRead
from app.schemas.dam import (
    CurrentCapacityRead,
    DamCapacityCreate,
    DamCapacityIngestResult,
    DamCapacityRead,
    DamCreate,
    DamRead,
    OverflowReadingRead,
)
from app.security import require_api_key, require_scope
from app.services import dams as dams_service
from app.utils.audit import actor_from_api_key

router = APIRouter(prefix="/dams", tags=["dams"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[DamRead])
def list_dams(db: Session = Depends(get_db)) -> list[Dam]:
    return dams_service.list_dams(db)


@router.post("", response_model=DamRead, status_code=status.HTTP_201_CREATED)
def create_dam(
    payload: DamCreate,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> Dam:
    return dams_service.create_dam(db, payload, actor=actor_from_api_key(api_key, fallback="apikey:unknown"))


@router.get("/alerts", response_model=list[OverflowReadingRead])
def overflow_readings(db: Session = Depends(get_db)) -> list[dict]:
    """Overflow readings from the last 24 hours."""

    return dams_service.overflow_readings(db)


@router.get("/regions/{region}", response_model=list[DamRead])
def dams_by_region(region: str, db: Session = Depends(get_db)) -> list[Dam]:
    return dams_service.dams_by_region(db, region)


@router.post(
    "/capacity",
    response_model=DamCapacityIngestResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope({ApiScope.operator}))],
)
def record_capacity(payload: DamCapacityCreate, db: Session = Depends(get_db)) -> DamCapacityIngestResult:
    reading, triggered = dams_service.record_capacity(db, payload)
    return DamCapacityIngestResult(
        reading=DamCapacityRead.model_validate(reading),
        alerts=[AlertRead.model_validate(item.alert) for item in triggered],
    )


@router.get("/{dam_id}", response_model=DamRead)
def get_dam(dam_id: int, db: Session = Depends(get_db)) -> Dam:
    return dams_service.get_dam(db, dam_id)


@router.get("/{dam_id}/capacity", response_model=CurrentCapacityRead)
def get_current_capacity(dam_id: int, db: Session = Depends(get_db)) -> dict:
    return dams_service.get_current_capacity(db, dam_id)


@router.get("/{dam_id}/capacity/history", response_model=list[DamCapacityRead])
def get_capacity_history(
    dam_id: int,
    start: datetime | None = Query(default=None, alias="start_date"),
    end: datetime | None = Query(default=None, alias="end_date"),
    limit: int = Query(default=dams_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[DamCapacity]:
    return dams_service.get_capacity_history(db, dam_id, start=start, end=end, limit=limit)
