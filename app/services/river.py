"""River gauge stations, level readings and flood-risk classification."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.alert_configuration import AlertType
from app.models.river import RiverLevel, RiverLevelStatus, Station
from app.schemas.river import RiverLevelCreate, StationCreate
from app.services.alert_engine import TriggeredAlert
from app.services.alert_store import build_evaluator
from app.services.notifications import NotificationDispatcher
from app.utils.audit import log_audit
from app.utils.errors import not_found
from app.utils.time import hours_ago, utcnow

logger = logging.getLogger(__name__)

WARNING_FRACTION_OF_DANGER = 0.8
DEFAULT_HISTORY_LIMIT = 100


def calculate_flood_risk(level: float, danger_level: float, flood_level: float) -> RiverLevelStatus:
    """Bucket a level against the station's marks; the first matching bucket wins."""

    if level >= flood_level:
        return RiverLevelStatus.CRITICAL
    if level >= danger_level:
        return RiverLevelStatus.DANGER
    if level >= danger_level * WARNING_FRACTION_OF_DANGER:
        return RiverLevelStatus.WARNING
    return RiverLevelStatus.SAFE


def list_stations(db: Session) -> list[Station]:
    stmt = select(Station).where(Station.is_active.is_(True)).order_by(Station.name)
    return list(db.scalars(stmt).all())


def get_station(db: Session, station_id: int) -> Station:
    station = db.get(Station, station_id)
    if station is None:
        raise not_found("STATION_NOT_FOUND", f"Station {station_id} not found.")
    return station


def create_station(db: Session, payload: StationCreate, *, actor: str) -> Station:
    station = Station(**payload.model_dump())
    db.add(station)
    db.flush()
    log_audit(
        db,
        actor=actor,
        action="STATION_CREATED",
        entity="Station",
        entity_id=station.id,
        data={"name": station.name, "river_name": station.river_name},
    )
    db.commit()
    db.refresh(station)
    logger.info("River station created", extra={"station_id": station.id})
    return station


def get_current_level(db: Session, station_id: int) -> dict[str, object]:
    """Latest reading for a station, re-classified against the station's current marks."""

    station = get_station(db, station_id)
    latest = db.scalars(
        select(RiverLevel)
        .where(RiverLevel.station_id == station_id)
        .order_by(RiverLevel.timestamp.desc(), RiverLevel.id.desc())
        .limit(1)
    ).first()

    if latest is None:
        return {
            "station": station,
            "level": None,
            "status": RiverLevelStatus.SAFE,
            "message": "No level data available",
        }

    return {
        "station": station,
        "level": latest.level,
        "status": calculate_flood_risk(latest.level, station.danger_level, station.flood_level),
        "timestamp": latest.timestamp,
    }


def get_level_history(
    db: Session,
    station_id: int,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[RiverLevel]:
    get_station(db, station_id)
    stmt = select(RiverLevel).where(RiverLevel.station_id == station_id)
    if start is not None:
        stmt = stmt.where(RiverLevel.timestamp >= start)
    if end is not None:
        stmt = stmt.where(RiverLevel.timestamp <= end)
    stmt = stmt.order_by(RiverLevel.timestamp.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def stations_by_river(db: Session, river_name: str) -> list[Station]:
    stmt = (
        select(Station)
        .where(Station.river_name == river_name, Station.is_active.is_(True))
        .order_by(Station.name)
    )
    return list(db.scalars(stmt).all())


def stations_by_region(db: Session, region: str) -> list[Station]:
    stmt = (
        select(Station)
        .where(Station.region == region, Station.is_active.is_(True))
        .order_by(Station.name)
    )
    return list(db.scalars(stmt).all())


def critical_levels(db: Session, *, hours: int = 24) -> list[dict[str, object]]:
    """Critical readings from the last ``hours`` hours, newest first."""

    stmt = (
        select(RiverLevel)
        .options(selectinload(RiverLevel.station))
        .where(
            RiverLevel.status == RiverLevelStatus.CRITICAL,
            RiverLevel.timestamp >= hours_ago(hours),
        )
        .order_by(RiverLevel.timestamp.desc())
    )
    return [
        {
            "station": reading.station,
            "level": reading.level,
            "status": reading.status,
            "timestamp": reading.timestamp,
        }
        for reading in db.scalars(stmt).all()
    ]


def record_level(db: Session, payload: RiverLevelCreate) -> tuple[RiverLevel, list[TriggeredAlert]]:
    """Classify and persist a level reading, then run it through the alert evaluator."""

    station = get_station(db, payload.station_id)
    status = calculate_flood_risk(payload.level, station.danger_level, station.flood_level)
    reading = RiverLevel(
        station_id=station.id,
        level=payload.level,
        status=status,
        timestamp=payload.timestamp or utcnow(),
    )
    db.add(reading)
    db.flush()

    triggered = build_evaluator(db).evaluate(AlertType.RIVER, str(station.id), reading.level)
    NotificationDispatcher(db).dispatch(triggered)
    db.commit()
    logger.info(
        "River level recorded",
        extra={"station_id": station.id, "level": reading.level, "status": status.value},
    )
    return reading, triggered


__all__ = [
    "calculate_flood_risk",
    "create_station",
    "critical_levels",
    "get_current_level",
    "get_level_history",
    "get_station",
    "list_stations",
    "record_level",
    "stations_by_region",
    "stations_by_river",
]
