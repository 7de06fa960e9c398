"""Rainfall stations, daily totals and seasonal aggregates."""
from __future__ import annotations

import logging
from datetime import date, timedelta

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.alert_configuration import AlertType
from app.models.rainfall import RainfallData, RainfallStation
from app.schemas.rainfall import RainfallReadingCreate, RainfallStationCreate
from app.services.alert_engine import TriggeredAlert
from app.services.alert_store import build_evaluator
from app.services.notifications import NotificationDispatcher
from app.utils.audit import log_audit
from app.utils.errors import error_response, not_found
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100
RISK_WINDOW_DAYS = 30
SEASONS = ("summer", "monsoon", "winter")


def season_for_month(month: int) -> str:
    if 3 <= month <= 5:
        return "summer"
    if 6 <= month <= 9:
        return "monsoon"
    return "winter"


def drought_risk(average_mm: float) -> str:
    if average_mm < 10:
        return "high"
    if average_mm < 25:
        return "medium"
    return "low"


def flood_risk(average_mm: float) -> str:
    if average_mm > 100:
        return "high"
    if average_mm > 50:
        return "medium"
    return "low"


def list_stations(db: Session) -> list[RainfallStation]:
    stmt = select(RainfallStation).where(RainfallStation.is_active.is_(True)).order_by(RainfallStation.name)
    return list(db.scalars(stmt).all())


def get_station(db: Session, station_id: int) -> RainfallStation:
    station = db.get(RainfallStation, station_id)
    if station is None:
        raise not_found("RAINFALL_STATION_NOT_FOUND", f"Rainfall station {station_id} not found.")
    return station


def create_station(db: Session, payload: RainfallStationCreate, *, actor: str) -> RainfallStation:
    station = RainfallStation(**payload.model_dump())
    db.add(station)
    db.flush()
    log_audit(
        db,
        actor=actor,
        action="RAINFALL_STATION_CREATED",
        entity="RainfallStation",
        entity_id=station.id,
        data={"name": station.name},
    )
    db.commit()
    db.refresh(station)
    return station


def get_history(
    db: Session,
    station_id: int,
    *,
    start: date | None = None,
    end: date | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[RainfallData]:
    get_station(db, station_id)
    stmt = select(RainfallData).where(RainfallData.station_id == station_id)
    if start is not None:
        stmt = stmt.where(RainfallData.date >= start)
    if end is not None:
        stmt = stmt.where(RainfallData.date <= end)
    stmt = stmt.order_by(RainfallData.date.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def seasonal_analysis(db: Session, station_id: int, year: int | None = None) -> dict[str, object]:
    """Per-season totals for one calendar year (defaults to the current year)."""

    station = get_station(db, station_id)
    target_year = year or utcnow().year
    rows = db.scalars(
        select(RainfallData)
        .where(
            RainfallData.station_id == station_id,
            RainfallData.date >= date(target_year, 1, 1),
            RainfallData.date <= date(target_year, 12, 31),
        )
        .order_by(RainfallData.date)
    ).all()

    seasonal = {name: {"total": 0.0, "days": 0} for name in SEASONS}
    for row in rows:
        bucket = seasonal[season_for_month(row.date.month)]
        bucket["total"] += row.rainfall
        bucket["days"] += 1
    for bucket in seasonal.values():
        bucket["total"] = round(bucket["total"], 2)
        bucket["average"] = round(bucket["total"] / bucket["days"], 2) if bucket["days"] else 0.0

    return {"station": station, "year": target_year, "seasonal": seasonal}


def risk_indicators(db: Session, region: str | None = None) -> dict[str, object]:
    """Drought and flood risk from the average daily total over the last 30 days."""

    stmt = select(RainfallData.rainfall).where(
        RainfallData.date >= utcnow().date() - timedelta(days=RISK_WINDOW_DAYS)
    )
    if region:
        stmt = stmt.join(RainfallStation).where(RainfallStation.region == region)
    totals = list(db.scalars(stmt).all())
    average = sum(totals) / (len(totals) or 1)
    return {
        "region": region or "all",
        "average_rainfall": round(average, 2),
        "drought_risk": drought_risk(average),
        "flood_risk": flood_risk(average),
        "period_days": RISK_WINDOW_DAYS,
    }


def record_reading(db: Session, payload: RainfallReadingCreate) -> tuple[RainfallData, list[TriggeredAlert]]:
    station = get_station(db, payload.station_id)
    reading = RainfallData(station_id=station.id, rainfall=payload.rainfall, date=payload.date)
    try:
        with db.begin_nested():
            db.add(reading)
            db.flush()
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_response(
                "RAINFALL_READING_EXISTS",
                "A reading for this station and date already exists.",
                {"station_id": station.id, "date": payload.date.isoformat()},
            ),
        ) from exc

    triggered = build_evaluator(db).evaluate(AlertType.RAINFALL, str(station.id), reading.rainfall)
    NotificationDispatcher(db).dispatch(triggered)
    db.commit()
    logger.info("Rainfall recorded", extra={"station_id": station.id, "rainfall": reading.rainfall})
    return reading, triggered
