"""Threshold alert evaluation and open-alert deduplication.

A reading for a monitored entity is compared against every enabled alert
configuration watching that entity. A configuration whose condition holds
opens a new alert unless one is already open for it, so each configuration
has at most one unresolved alert at a time. The caller owns notification
dispatch for the alerts returned.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from typing import Protocol, Sequence

from app.models.alert import Alert, AlertSeverity
from app.models.alert_configuration import AlertConfiguration, AlertType, ThresholdOperator
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

# Absolute, not relative: 0.01 regardless of the threshold's magnitude.
EQ_TOLERANCE = 0.01
CRITICAL_DEVIATION_PCT = 50.0
WARNING_DEVIATION_PCT = 20.0

_OPERATOR_PHRASES = {
    ThresholdOperator.GT: "exceeded",
    ThresholdOperator.LT: "dropped below",
    ThresholdOperator.EQ: "reached",
}


class AlertEvaluationError(Exception):
    """Base class for evaluator errors."""


class InvalidInput(AlertEvaluationError, ValueError):
    """The reading passed to ``evaluate`` is malformed; nothing was evaluated."""


class DegenerateThreshold(AlertEvaluationError):
    """Severity cannot be derived because the configured threshold is zero."""


class DuplicateOpenAlert(AlertEvaluationError):
    """The alert store refused a second open alert for the same configuration."""

    def __init__(self, configuration_id: int | None) -> None:
        super().__init__(f"Alert configuration {configuration_id} already has an open alert")
        self.configuration_id = configuration_id


class ConfigurationStore(Protocol):
    def find_enabled_by_entity(self, entity_type: AlertType, entity_id: str) -> Sequence[AlertConfiguration]:
        ...


class AlertStore(Protocol):
    def find_open_by_configuration(self, configuration_id: int) -> Alert | None:
        ...

    def create(self, alert: Alert) -> Alert:
        """Persist ``alert``; raise ``DuplicateOpenAlert`` if one is already open."""
        ...


class EntityNameResolver(Protocol):
    def resolve(self, entity_type: AlertType, entity_id: str) -> str:
        ...


@dataclass(frozen=True)
class TriggeredAlert:
    """A newly opened alert together with the configuration that produced it."""

    alert: Alert
    configuration: AlertConfiguration


def check_threshold(value: float, operator: ThresholdOperator, threshold: float) -> bool:
    """Return True when ``value`` satisfies ``operator`` against ``threshold``."""

    if operator == ThresholdOperator.GT:
        return value > threshold
    if operator == ThresholdOperator.LT:
        return value < threshold
    if operator == ThresholdOperator.EQ:
        return abs(value - threshold) < EQ_TOLERANCE
    return False


def calculate_severity(current_value: float, threshold_value: float) -> AlertSeverity:
    """Grade a breach by its deviation relative to the threshold.

    Raises ``DegenerateThreshold`` for a zero threshold, where the relative
    deviation is undefined.
    """

    if threshold_value == 0:
        raise DegenerateThreshold("Threshold value is zero")
    percentage = abs(current_value - threshold_value) / threshold_value * 100
    if percentage > CRITICAL_DEVIATION_PCT:
        return AlertSeverity.CRITICAL
    if percentage > WARNING_DEVIATION_PCT:
        return AlertSeverity.WARNING
    return AlertSeverity.INFO


def format_reading(value: float) -> str:
    """Render a reading the way it is shown in alert messages (``310``, ``12.5``)."""

    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_alert_message(
    entity_type: AlertType,
    current_value: float,
    operator: ThresholdOperator,
    threshold_value: float,
) -> str:
    phrase = _OPERATOR_PHRASES[operator]
    return (
        f"{entity_type.value} value {phrase} threshold: "
        f"{format_reading(current_value)} (threshold: {format_reading(threshold_value)})"
    )


def _coerce_entity_type(entity_type: AlertType | str) -> AlertType:
    if isinstance(entity_type, AlertType):
        return entity_type
    try:
        return AlertType(entity_type)
    except ValueError as exc:
        raise InvalidInput(f"Unknown entity type: {entity_type!r}") from exc


def _coerce_entity_id(entity_id: str) -> str:
    if not isinstance(entity_id, str) or not entity_id.strip():
        raise InvalidInput("entity_id must be a non-empty string")
    return entity_id.strip()


def _coerce_value(current_value: float) -> float:
    if isinstance(current_value, bool) or not isinstance(current_value, (Real, Decimal)):
        raise InvalidInput(f"current_value must be a real number, got {type(current_value).__name__}")
    value = float(current_value)
    if not math.isfinite(value):
        raise InvalidInput(f"current_value must be finite, got {value}")
    return value


class ThresholdAlertEvaluator:
    """Stateless evaluator wired to its configuration, alert and name collaborators."""

    def __init__(
        self,
        configurations: ConfigurationStore,
        alerts: AlertStore,
        names: EntityNameResolver,
    ) -> None:
        self.configurations = configurations
        self.alerts = alerts
        self.names = names

    def evaluate(
        self,
        entity_type: AlertType | str,
        entity_id: str,
        current_value: float,
    ) -> list[TriggeredAlert]:
        """Open alerts for every enabled configuration the reading breaches.

        Returns the newly opened alerts in configuration order. Store errors
        propagate to the caller.
        """

        entity_type = _coerce_entity_type(entity_type)
        entity_id = _coerce_entity_id(entity_id)
        value = _coerce_value(current_value)

        configurations = self.configurations.find_enabled_by_entity(entity_type, entity_id)
        if not configurations:
            return []

        triggered: list[TriggeredAlert] = []
        for configuration in configurations:
            opened = self._evaluate_configuration(configuration, entity_type, entity_id, value)
            if opened is not None:
                triggered.append(TriggeredAlert(alert=opened, configuration=configuration))

        if triggered:
            logger.info(
                "Threshold alerts opened",
                extra={
                    "entity_type": entity_type.value,
                    "entity_id": entity_id,
                    "value": value,
                    "alert_ids": [item.alert.id for item in triggered],
                },
            )
        return triggered

    def _evaluate_configuration(
        self,
        configuration: AlertConfiguration,
        entity_type: AlertType,
        entity_id: str,
        value: float,
    ) -> Alert | None:
        operator = ThresholdOperator(configuration.threshold_operator)
        threshold = float(configuration.threshold_value)

        if not check_threshold(value, operator, threshold):
            return None

        if self.alerts.find_open_by_configuration(configuration.id) is not None:
            logger.debug("Open alert already exists", extra={"configuration_id": configuration.id})
            return None

        try:
            severity = calculate_severity(value, threshold)
        except DegenerateThreshold:
            logger.warning(
                "Skipping alert configuration with zero threshold",
                extra={"configuration_id": configuration.id, "entity_id": entity_id},
            )
            return None

        alert = Alert(
            configuration_id=configuration.id,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=self._resolve_name(entity_type, entity_id),
            severity=severity,
            message=build_alert_message(entity_type, value, operator, threshold),
            triggered_at=utcnow(),
            acknowledged=False,
        )
        try:
            return self.alerts.create(alert)
        except DuplicateOpenAlert:
            logger.info(
                "Concurrent evaluation already opened this alert",
                extra={"configuration_id": configuration.id},
            )
            return None

    def _resolve_name(self, entity_type: AlertType, entity_id: str) -> str:
        try:
            name = self.names.resolve(entity_type, entity_id)
        except Exception:  # noqa: BLE001 - display name is cosmetic
            logger.warning(
                "Entity name lookup failed",
                exc_info=True,
                extra={"entity_type": entity_type.value, "entity_id": entity_id},
            )
            return entity_id
        return name or entity_id


__all__ = [
    "AlertEvaluationError",
    "AlertStore",
    "ConfigurationStore",
    "DegenerateThreshold",
    "DuplicateOpenAlert",
    "EntityNameResolver",
    "InvalidInput",
    "ThresholdAlertEvaluator",
    "TriggeredAlert",
    "build_alert_message",
    "calculate_severity",
    "check_threshold",
    "format_reading",
]
