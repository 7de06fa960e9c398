"""Alert configuration management and alert lifecycle for a user."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.alert import Alert
from app.models.alert_configuration import AlertConfiguration, AlertType
from app.models.user import User
from app.schemas.alert import AlertConfigurationCreate, AlertConfigurationUpdate
from app.services.alert_engine import TriggeredAlert
from app.services.alert_store import build_evaluator
from app.services.notifications import NotificationDispatcher
from app.utils.audit import log_audit
from app.utils.errors import not_found
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


def _actor(user: User) -> str:
    return f"user:{user.id}"


def _owned_configuration(db: Session, configuration_id: int, user: User) -> AlertConfiguration:
    configuration = db.get(AlertConfiguration, configuration_id)
    # Another user's configuration is indistinguishable from a missing one.
    if configuration is None or configuration.user_id != user.id:
        raise not_found("ALERT_CONFIG_NOT_FOUND", "Alert configuration not found.")
    return configuration


def _owned_alert(db: Session, alert_id: int, user: User) -> Alert:
    stmt = (
        select(Alert)
        .join(AlertConfiguration, Alert.configuration_id == AlertConfiguration.id)
        .where(Alert.id == alert_id, AlertConfiguration.user_id == user.id)
    )
    alert = db.scalars(stmt).first()
    if alert is None:
        raise not_found("ALERT_NOT_FOUND", "Alert not found.")
    return alert


def create_configuration(db: Session, user: User, payload: AlertConfigurationCreate) -> AlertConfiguration:
    configuration = AlertConfiguration(
        user_id=user.id,
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        threshold_operator=payload.threshold_operator,
        threshold_value=payload.threshold_value,
        channels=[channel.value for channel in payload.channels],
        enabled=payload.enabled,
    )
    db.add(configuration)
    db.flush()
    log_audit(
        db,
        actor=_actor(user),
        action="ALERT_CONFIG_CREATED",
        entity="AlertConfiguration",
        entity_id=configuration.id,
        data=payload.model_dump(mode="json"),
    )
    db.commit()
    db.refresh(configuration)
    logger.info(
        "Alert configuration created",
        extra={"configuration_id": configuration.id, "user_id": user.id},
    )
    return configuration


def list_configurations(db: Session, user: User) -> list[AlertConfiguration]:
    stmt = (
        select(AlertConfiguration)
        .where(AlertConfiguration.user_id == user.id)
        .order_by(AlertConfiguration.created_at.desc(), AlertConfiguration.id.desc())
    )
    return list(db.scalars(stmt).all())


def update_configuration(
    db: Session, user: User, configuration_id: int, payload: AlertConfigurationUpdate
) -> AlertConfiguration:
    configuration = _owned_configuration(db, configuration_id, user)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "channels" in changes:
        changes["channels"] = [channel.value for channel in changes["channels"]]
    for field, value in changes.items():
        setattr(configuration, field, value)
    log_audit(
        db,
        actor=_actor(user),
        action="ALERT_CONFIG_UPDATED",
        entity="AlertConfiguration",
        entity_id=configuration.id,
        data=payload.model_dump(exclude_unset=True, exclude_none=True, mode="json"),
    )
    db.commit()
    db.refresh(configuration)
    return configuration


def delete_configuration(db: Session, user: User, configuration_id: int) -> None:
    configuration = _owned_configuration(db, configuration_id, user)
    db.delete(configuration)
    log_audit(
        db,
        actor=_actor(user),
        action="ALERT_CONFIG_DELETED",
        entity="AlertConfiguration",
        entity_id=configuration_id,
        data={"entity_type": configuration.entity_type.value, "entity_id": configuration.entity_id},
    )
    db.commit()


def active_alerts(db: Session, user: User) -> list[Alert]:
    stmt = (
        select(Alert)
        .join(AlertConfiguration, Alert.configuration_id == AlertConfiguration.id)
        .where(AlertConfiguration.user_id == user.id, Alert.resolved_at.is_(None))
        .order_by(Alert.triggered_at.desc(), Alert.id.desc())
    )
    return list(db.scalars(stmt).all())


def alert_history(db: Session, user: User, limit: int = DEFAULT_HISTORY_LIMIT) -> list[Alert]:
    stmt = (
        select(Alert)
        .join(AlertConfiguration, Alert.configuration_id == AlertConfiguration.id)
        .where(AlertConfiguration.user_id == user.id)
        .order_by(Alert.triggered_at.desc(), Alert.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt).all())


def acknowledge_alert(db: Session, user: User, alert_id: int) -> Alert:
    alert = _owned_alert(db, alert_id, user)
    if not alert.acknowledged:
        alert.acknowledged = True
        alert.acknowledged_by = user.id
        alert.acknowledged_at = utcnow()
        log_audit(
            db,
            actor=_actor(user),
            action="ALERT_ACKNOWLEDGED",
            entity="Alert",
            entity_id=alert.id,
            data={"configuration_id": alert.configuration_id},
        )
        db.commit()
        db.refresh(alert)
    return alert


def resolve_alert(db: Session, user: User, alert_id: int) -> Alert:
    """Close an alert; the next breach on its configuration opens a new one."""

    alert = _owned_alert(db, alert_id, user)
    if alert.resolved_at is None:
        alert.resolved_at = utcnow()
        log_audit(
            db,
            actor=_actor(user),
            action="ALERT_RESOLVED",
            entity="Alert",
            entity_id=alert.id,
            data={"configuration_id": alert.configuration_id},
        )
        db.commit()
        db.refresh(alert)
        logger.info("Alert resolved", extra={"alert_id": alert.id, "user_id": user.id})
    return alert


def evaluate_reading(
    db: Session, entity_type: AlertType, entity_id: str, value: float
) -> tuple[list[TriggeredAlert], int]:
    """Run an explicit reading through the evaluator and queue its notifications."""

    triggered = build_evaluator(db).evaluate(entity_type, entity_id, value)
    queued = NotificationDispatcher(db).dispatch(triggered)
    db.commit()
    return triggered, len(queued)


__all__ = [
    "acknowledge_alert",
    "active_alerts",
    "alert_history",
    "create_configuration",
    "delete_configuration",
    "evaluate_reading",
    "list_configurations",
    "resolve_alert",
    "update_configuration",
]
