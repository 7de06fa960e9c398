"""SQLAlchemy-backed collaborators for the threshold alert evaluator."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.alert import Alert
from app.models.alert_configuration import AlertConfiguration, AlertType
from app.models.dam import Dam
from app.models.river import Station
from app.services.alert_engine import DuplicateOpenAlert, ThresholdAlertEvaluator

logger = logging.getLogger(__name__)


class SqlAlertConfigurationStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_enabled_by_entity(self, entity_type: AlertType, entity_id: str) -> Sequence[AlertConfiguration]:
        stmt = (
            select(AlertConfiguration)
            .where(
                AlertConfiguration.entity_type == entity_type,
                AlertConfiguration.entity_id == entity_id,
                AlertConfiguration.enabled.is_(True),
            )
            .order_by(AlertConfiguration.id)
        )
        return list(self.db.scalars(stmt).all())


class SqlAlertStore:
    """Alert persistence guarded by the ``uq_alerts_open_configuration`` partial index.

    ``create`` flushes inside a SAVEPOINT and leaves the commit to the caller.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_open_by_configuration(self, configuration_id: int) -> Alert | None:
        stmt = select(Alert).where(
            Alert.configuration_id == configuration_id,
            Alert.resolved_at.is_(None),
        )
        return self.db.scalars(stmt).first()

    def create(self, alert: Alert) -> Alert:
        try:
            with self.db.begin_nested():
                self.db.add(alert)
                self.db.flush()
        except IntegrityError as exc:
            logger.info(
                "Open alert insert rejected by unique index",
                extra={"configuration_id": alert.configuration_id},
            )
            raise DuplicateOpenAlert(alert.configuration_id) from exc
        return alert


class SqlEntityNameResolver:
    """Look up display names for alerted entities, falling back to the raw id."""

    _MODELS = {
        AlertType.RIVER: Station,
        AlertType.DAM: Dam,
    }

    def __init__(self, db: Session) -> None:
        self.db = db

    def resolve(self, entity_type: AlertType, entity_id: str) -> str:
        model = self._MODELS.get(entity_type)
        if model is None:
            return entity_id
        try:
            row = self.db.get(model, int(entity_id))
        except ValueError:
            return entity_id
        except SQLAlchemyError:
            logger.warning(
                "Entity name lookup failed",
                exc_info=True,
                extra={"entity_type": entity_type.value, "entity_id": entity_id},
            )
            return entity_id
        if row is None:
            return entity_id
        return row.name


def build_evaluator(db: Session) -> ThresholdAlertEvaluator:
    """Return an evaluator bound to ``db``."""

    return ThresholdAlertEvaluator(
        SqlAlertConfigurationStore(db),
        SqlAlertStore(db),
        SqlEntityNameResolver(db),
    )


__all__ = [
    "SqlAlertConfigurationStore",
    "SqlAlertStore",
    "SqlEntityNameResolver",
    "build_evaluator",
]
