"""Groundwater wells and depth readings."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.alert_configuration import AlertType
from app.models.groundwater import GroundwaterDepth, GroundwaterWell
from app.schemas.groundwater import DepthCreate, WellCreate
from app.services.alert_engine import TriggeredAlert
from app.services.alert_store import build_evaluator
from app.services.notifications import NotificationDispatcher
from app.utils.audit import log_audit
from app.utils.errors import not_found
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


def list_wells(db: Session) -> list[GroundwaterWell]:
    stmt = select(GroundwaterWell).where(GroundwaterWell.is_active.is_(True)).order_by(GroundwaterWell.name)
    return list(db.scalars(stmt).all())


def get_well(db: Session, well_id: int) -> GroundwaterWell:
    well = db.get(GroundwaterWell, well_id)
    if well is None:
        raise not_found("WELL_NOT_FOUND", f"Well {well_id} not found.")
    return well


def create_well(db: Session, payload: WellCreate, *, actor: str) -> GroundwaterWell:
    well = GroundwaterWell(**payload.model_dump())
    db.add(well)
    db.flush()
    log_audit(db, actor=actor, action="WELL_CREATED", entity="GroundwaterWell", entity_id=well.id, data={"name": well.name})
    db.commit()
    db.refresh(well)
    return well


def _latest_depth(db: Session, well_id: int) -> GroundwaterDepth | None:
    stmt = (
        select(GroundwaterDepth)
        .where(GroundwaterDepth.well_id == well_id)
        .order_by(GroundwaterDepth.timestamp.desc(), GroundwaterDepth.id.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def get_current_depth(db: Session, well_id: int) -> dict[str, object]:
    well = get_well(db, well_id)
    latest = _latest_depth(db, well_id)
    if latest is None:
        return {"well": well, "depth": None, "message": "No depth data available"}
    return {
        "well": well,
        "depth": latest.depth,
        "timestamp": latest.timestamp,
        "season": latest.season,
    }


def get_depth_history(
    db: Session,
    well_id: int,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[GroundwaterDepth]:
    get_well(db, well_id)
    stmt = select(GroundwaterDepth).where(GroundwaterDepth.well_id == well_id)
    if start is not None:
        stmt = stmt.where(GroundwaterDepth.timestamp >= start)
    if end is not None:
        stmt = stmt.where(GroundwaterDepth.timestamp <= end)
    stmt = stmt.order_by(GroundwaterDepth.timestamp.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def _latest_depths_by_well(db: Session, well_ids: list[int]) -> dict[int, GroundwaterDepth]:
    if not well_ids:
        return {}
    newest = (
        select(GroundwaterDepth.well_id, func.max(GroundwaterDepth.timestamp).label("newest"))
        .where(GroundwaterDepth.well_id.in_(well_ids))
        .group_by(GroundwaterDepth.well_id)
        .subquery()
    )
    stmt = (
        select(GroundwaterDepth)
        .join(
            newest,
            (GroundwaterDepth.well_id == newest.c.well_id) & (GroundwaterDepth.timestamp == newest.c.newest),
        )
        .order_by(GroundwaterDepth.id)
    )
    # Readings sharing the newest timestamp resolve to the last inserted one.
    return {depth.well_id: depth for depth in db.scalars(stmt).all()}


def regional_depths(db: Session, region: str) -> list[dict[str, object]]:
    wells = list(
        db.scalars(
            select(GroundwaterWell)
            .where(GroundwaterWell.region == region, GroundwaterWell.is_active.is_(True))
            .order_by(GroundwaterWell.name)
        ).all()
    )
    latest = _latest_depths_by_well(db, [well.id for well in wells])
    result = []
    for well in wells:
        depth = latest.get(well.id)
        result.append(
            {
                "well": well,
                "latest_depth": {"depth": depth.depth, "timestamp": depth.timestamp} if depth else None,
            }
        )
    return result


def heatmap(db: Session, region: str | None = None) -> list[dict[str, object]]:
    """Latest depth per active well, optionally restricted to a region."""

    stmt = select(GroundwaterWell).where(GroundwaterWell.is_active.is_(True))
    if region:
        stmt = stmt.where(GroundwaterWell.region == region)
    wells = list(db.scalars(stmt.order_by(GroundwaterWell.id)).all())
    latest = _latest_depths_by_well(db, [well.id for well in wells])
    return [
        {
            "id": well.id,
            "name": well.name,
            "location": well.location,
            "depth": latest[well.id].depth if well.id in latest else None,
            "timestamp": latest[well.id].timestamp if well.id in latest else None,
        }
        for well in wells
    ]


def record_depth(db: Session, payload: DepthCreate) -> tuple[GroundwaterDepth, list[TriggeredAlert]]:
    well = get_well(db, payload.well_id)
    reading = GroundwaterDepth(
        well_id=well.id,
        depth=payload.depth,
        season=payload.season,
        timestamp=payload.timestamp or utcnow(),
    )
    db.add(reading)
    db.flush()

    triggered = build_evaluator(db).evaluate(AlertType.GROUNDWATER, str(well.id), reading.depth)
    NotificationDispatcher(db).dispatch(triggered)
    db.commit()
    logger.info("Groundwater depth recorded", extra={"well_id": well.id, "depth": reading.depth})
    return reading, triggered
