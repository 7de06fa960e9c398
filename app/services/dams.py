"""Dams, reservoir storage readings and fill-status classification."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.alert_configuration import AlertType
from app.models.dam import Dam, DamCapacity, DamStatus
from app.schemas.dam import DamCapacityCreate, DamCreate
from app.services.alert_engine import TriggeredAlert
from app.services.alert_store import build_evaluator
from app.services.notifications import NotificationDispatcher
from app.utils.audit import log_audit
from app.utils.errors import not_found
from app.utils.time import hours_ago, utcnow

logger = logging.getLogger(__name__)

OVERFLOW_PCT = 100.0
CRITICAL_PCT = 90.0
WARNING_PCT = 75.0
DEFAULT_HISTORY_LIMIT = 100


def calculate_status(percentage: float) -> DamStatus:
    """Bucket a fill percentage; boundaries belong to the higher bucket."""

    if percentage >= OVERFLOW_PCT:
        return DamStatus.OVERFLOW
    if percentage >= CRITICAL_PCT:
        return DamStatus.CRITICAL
    if percentage >= WARNING_PCT:
        return DamStatus.WARNING
    return DamStatus.NORMAL


def fill_percentage(storage: float, total_capacity: float) -> float:
    return storage / total_capacity * 100


def list_dams(db: Session) -> list[Dam]:
    stmt = select(Dam).where(Dam.is_active.is_(True)).order_by(Dam.name)
    return list(db.scalars(stmt).all())


def get_dam(db: Session, dam_id: int) -> Dam:
    dam = db.get(Dam, dam_id)
    if dam is None:
        raise not_found("DAM_NOT_FOUND", f"Dam {dam_id} not found.")
    return dam


def create_dam(db: Session, payload: DamCreate, *, actor: str) -> Dam:
    dam = Dam(**payload.model_dump())
    db.add(dam)
    db.flush()
    log_audit(
        db,
        actor=actor,
        action="DAM_CREATED",
        entity="Dam",
        entity_id=dam.id,
        data={"name": dam.name, "total_capacity": dam.total_capacity},
    )
    db.commit()
    db.refresh(dam)
    logger.info("Dam created", extra={"dam_id": dam.id})
    return dam


def get_current_capacity(db: Session, dam_id: int) -> dict[str, object]:
    dam = get_dam(db, dam_id)
    latest = db.scalars(
        select(DamCapacity)
        .where(DamCapacity.dam_id == dam_id)
        .order_by(DamCapacity.timestamp.desc(), DamCapacity.id.desc())
        .limit(1)
    ).first()

    if latest is None:
        return {
            "dam": dam,
            "storage": None,
            "capacity": dam.total_capacity,
            "percentage": 0.0,
            "status": DamStatus.NORMAL,
            "message": "No capacity data available",
        }

    percentage = fill_percentage(latest.storage, dam.total_capacity)
    return {
        "dam": dam,
        "storage": latest.storage,
        "capacity": dam.total_capacity,
        "percentage": round(percentage, 2),
        "inflow_rate": latest.inflow_rate,
        "outflow_rate": latest.outflow_rate,
        "power_generation": latest.power_generation,
        "status": calculate_status(percentage),
        "timestamp": latest.timestamp,
    }


def get_capacity_history(
    db: Session,
    dam_id: int,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[DamCapacity]:
    get_dam(db, dam_id)
    stmt = select(DamCapacity).where(DamCapacity.dam_id == dam_id)
    if start is not None:
        stmt = stmt.where(DamCapacity.timestamp >= start)
    if end is not None:
        stmt = stmt.where(DamCapacity.timestamp <= end)
    stmt = stmt.order_by(DamCapacity.timestamp.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def dams_by_region(db: Session, region: str) -> list[Dam]:
    stmt = select(Dam).where(Dam.region == region, Dam.is_active.is_(True)).order_by(Dam.name)
    return list(db.scalars(stmt).all())


def overflow_readings(db: Session, *, hours: int = 24) -> list[dict[str, object]]:
    stmt = (
        select(DamCapacity)
        .options(selectinload(DamCapacity.dam))
        .where(
            DamCapacity.status == DamStatus.OVERFLOW,
            DamCapacity.timestamp >= hours_ago(hours),
        )
        .order_by(DamCapacity.timestamp.desc())
    )
    return [
        {
            "dam": reading.dam,
            "storage": reading.storage,
            "capacity": reading.capacity,
            "percentage": reading.percentage,
            "status": reading.status,
            "timestamp": reading.timestamp,
        }
        for reading in db.scalars(stmt).all()
    ]


def record_capacity(db: Session, payload: DamCapacityCreate) -> tuple[DamCapacity, list[TriggeredAlert]]:
    """Persist a storage reading and evaluate alerts against its fill percentage."""

    dam = get_dam(db, payload.dam_id)
    percentage = fill_percentage(payload.storage, dam.total_capacity)
    reading = DamCapacity(
        dam_id=dam.id,
        storage=payload.storage,
        capacity=dam.total_capacity,
        percentage=round(percentage, 2),
        inflow_rate=payload.inflow_rate,
        outflow_rate=payload.outflow_rate,
        power_generation=payload.power_generation,
        status=calculate_status(percentage),
        timestamp=payload.timestamp or utcnow(),
    )
    db.add(reading)
    db.flush()

    triggered = build_evaluator(db).evaluate(AlertType.DAM, str(dam.id), reading.percentage)
    NotificationDispatcher(db).dispatch(triggered)
    db.commit()
    logger.info(
        "Dam capacity recorded",
        extra={"dam_id": dam.id, "percentage": reading.percentage, "status": reading.status.value},
    )
    return reading, triggered


__all__ = [
    "calculate_status",
    "create_dam",
    "dams_by_region",
    "fill_percentage",
    "get_capacity_history",
    "get_current_capacity",
    "get_dam",
    "list_dams",
    "overflow_readings",
    "record_capacity",
]
