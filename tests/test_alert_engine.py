"""Threshold evaluator behaviour against in-memory collaborators."""
import math
from decimal import Decimal
from itertools import count

import pytest

from app.models.alert import Alert, AlertSeverity
from app.models.alert_configuration import AlertConfiguration, AlertType, ThresholdOperator
from app.services.alert_engine import (
    DegenerateThreshold,
    DuplicateOpenAlert,
    InvalidInput,
    ThresholdAlertEvaluator,
    build_alert_message,
    calculate_severity,
    check_threshold,
    format_reading,
)


class FakeConfigurations:
    def __init__(self, configurations):
        self.configurations = list(configurations)

    def find_enabled_by_entity(self, entity_type, entity_id):
        return [
            c
            for c in self.configurations
            if c.entity_type == entity_type and c.entity_id == entity_id and c.enabled
        ]


class FakeAlerts:
    def __init__(self):
        self.rows: list[Alert] = []
        self.find_calls = 0
        self.refuse_next_create = False
        self._ids = count(1)

    def find_open_by_configuration(self, configuration_id):
        self.find_calls += 1
        for alert in self.rows:
            if alert.configuration_id == configuration_id and alert.resolved_at is None:
                return alert
        return None

    def create(self, alert):
        if self.refuse_next_create:
            self.refuse_next_create = False
            raise DuplicateOpenAlert(alert.configuration_id)
        alert.id = next(self._ids)
        self.rows.append(alert)
        return alert


class FakeNames:
    def __init__(self, names=None, broken=False):
        self.names = names or {}
        self.broken = broken

    def resolve(self, entity_type, entity_id):
        if self.broken:
            raise RuntimeError("lookup offline")
        return self.names.get((entity_type, entity_id), entity_id)


def _configuration(
    config_id,
    *,
    entity_type=AlertType.RIVER,
    entity_id="1",
    operator=ThresholdOperator.GT,
    threshold=10.0,
    enabled=True,
    user_id=1,
):
    return AlertConfiguration(
        id=config_id,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        threshold_operator=operator,
        threshold_value=threshold,
        channels=["email"],
        enabled=enabled,
    )


def _evaluator(configurations, alerts=None, names=None):
    alerts = alerts or FakeAlerts()
    return ThresholdAlertEvaluator(FakeConfigurations(configurations), alerts, names or FakeNames()), alerts


@pytest.mark.parametrize(
    ("value", "operator", "threshold", "expected"),
    [
        (11, ThresholdOperator.GT, 10, True),
        (10, ThresholdOperator.GT, 10, False),
        (9, ThresholdOperator.LT, 10, True),
        (10, ThresholdOperator.LT, 10, False),
        (10.005, ThresholdOperator.EQ, 10, True),
        (10.02, ThresholdOperator.EQ, 10, False),
        (1000.009, ThresholdOperator.EQ, 1000, True),
    ],
)
def test_check_threshold(value, operator, threshold, expected):
    assert check_threshold(value, operator, threshold) is expected


@pytest.mark.parametrize(
    ("current", "threshold", "expected"),
    [
        (160, 100, AlertSeverity.CRITICAL),
        (150, 100, AlertSeverity.WARNING),
        (121, 100, AlertSeverity.WARNING),
        (120, 100, AlertSeverity.INFO),
        (100, 100, AlertSeverity.INFO),
        (-16, -10, AlertSeverity.INFO),
        (40, 100, AlertSeverity.CRITICAL),
    ],
)
def test_calculate_severity_bands(current, threshold, expected):
    assert calculate_severity(current, threshold) is expected


def test_calculate_severity_rejects_zero_threshold():
    with pytest.raises(DegenerateThreshold, match="zero"):
        calculate_severity(5, 0)


def test_alert_message_formats_integral_and_fractional_values():
    assert format_reading(310.0) == "310"
    assert format_reading(12.5) == "12.5"
    assert (
        build_alert_message(AlertType.RIVER, 310, ThresholdOperator.GT, 300)
        == "river value exceeded threshold: 310 (threshold: 300)"
    )
    assert (
        build_alert_message(AlertType.GROUNDWATER, 2.5, ThresholdOperator.LT, 5)
        == "groundwater value dropped below threshold: 2.5 (threshold: 5)"
    )
    assert (
        build_alert_message(AlertType.DAM, 90, ThresholdOperator.EQ, 90)
        == "dam value reached threshold: 90 (threshold: 90)"
    )


def test_breach_opens_alert_with_resolved_name():
    config = _configuration(7, threshold=300)
    names = FakeNames({(AlertType.RIVER, "1"): "Varanasi Ghat"})
    evaluator, alerts = _evaluator([config], names=names)

    triggered = evaluator.evaluate(AlertType.RIVER, "1", 310)

    assert len(triggered) == 1
    alert = triggered[0].alert
    assert triggered[0].configuration is config
    assert alert.configuration_id == 7
    assert alert.entity_name == "Varanasi Ghat"
    assert alert.severity == AlertSeverity.INFO
    assert alert.message == "river value exceeded threshold: 310 (threshold: 300)"
    assert alert.acknowledged is False
    assert alert.resolved_at is None
    assert alert.triggered_at.tzinfo is not None
    assert alerts.rows == [alert]


def test_gauge_s1_opens_one_info_alert_and_ignores_the_follow_up_reading():
    evaluator, alerts = _evaluator([_configuration(1, entity_id="S1", threshold=290)])

    triggered = evaluator.evaluate(AlertType.RIVER, "S1", 310)

    assert len(triggered) == 1
    assert triggered[0].alert.severity == AlertSeverity.INFO
    assert triggered[0].alert.message == "river value exceeded threshold: 310 (threshold: 290)"
    assert triggered[0].alert.entity_name == "S1"

    assert evaluator.evaluate(AlertType.RIVER, "S1", 320) == []
    assert len(alerts.rows) == 1


def test_no_breach_returns_nothing_and_skips_dedup_lookup():
    evaluator, alerts = _evaluator([_configuration(1, threshold=300)])

    assert evaluator.evaluate(AlertType.RIVER, "1", 250) == []
    assert alerts.find_calls == 0


def test_open_alert_suppresses_repeat_until_resolved():
    config = _configuration(1, threshold=10)
    evaluator, alerts = _evaluator([config])

    first = evaluator.evaluate(AlertType.RIVER, "1", 20)
    assert len(first) == 1
    assert evaluator.evaluate(AlertType.RIVER, "1", 25) == []

    first[0].alert.resolved_at = first[0].alert.triggered_at
    again = evaluator.evaluate(AlertType.RIVER, "1", 25)
    assert len(again) == 1
    assert again[0].alert.id != first[0].alert.id


def test_each_configuration_is_evaluated_independently():
    configs = [
        _configuration(1, operator=ThresholdOperator.GT, threshold=10),
        _configuration(2, operator=ThresholdOperator.GT, threshold=50),
        _configuration(3, operator=ThresholdOperator.LT, threshold=100, user_id=2),
    ]
    evaluator, _ = _evaluator(configs)

    triggered = evaluator.evaluate(AlertType.RIVER, "1", 20)

    assert [item.configuration.id for item in triggered] == [1, 3]
    assert triggered[0].alert.severity == AlertSeverity.CRITICAL
    assert triggered[1].alert.severity == AlertSeverity.CRITICAL


def test_disabled_and_other_entity_configurations_are_ignored():
    configs = [
        _configuration(1, enabled=False),
        _configuration(2, entity_id="2"),
        _configuration(3, entity_type=AlertType.DAM),
    ]
    evaluator, _ = _evaluator(configs)

    assert evaluator.evaluate(AlertType.RIVER, "1", 99) == []


def test_zero_threshold_configuration_is_skipped_without_blocking_others():
    configs = [
        _configuration(1, operator=ThresholdOperator.GT, threshold=0),
        _configuration(2, operator=ThresholdOperator.GT, threshold=1),
    ]
    evaluator, alerts = _evaluator(configs)

    triggered = evaluator.evaluate(AlertType.RIVER, "1", 5)

    assert [item.configuration.id for item in triggered] == [2]
    assert len(alerts.rows) == 1


def test_store_duplicate_rejection_is_treated_as_already_open():
    evaluator, alerts = _evaluator([_configuration(1)])
    alerts.refuse_next_create = True

    assert evaluator.evaluate(AlertType.RIVER, "1", 20) == []
    assert alerts.rows == []


def test_name_lookup_failure_falls_back_to_entity_id():
    evaluator, _ = _evaluator([_configuration(1, entity_id="42")], names=FakeNames(broken=True))

    triggered = evaluator.evaluate(AlertType.RIVER, "42", 20)

    assert triggered[0].alert.entity_name == "42"


def test_string_entity_type_and_decimal_value_are_accepted():
    evaluator, _ = _evaluator([_configuration(1, entity_type=AlertType.RAINFALL, entity_id="5", threshold=100)])

    triggered = evaluator.evaluate("rainfall", " 5 ", Decimal("120.5"))

    assert triggered[0].alert.entity_type == AlertType.RAINFALL
    assert triggered[0].alert.entity_id == "5"


@pytest.mark.parametrize(
    ("entity_type", "entity_id", "value"),
    [
        ("volcano", "1", 10),
        (AlertType.RIVER, "", 10),
        (AlertType.RIVER, "   ", 10),
        (AlertType.RIVER, 1, 10),
        (AlertType.RIVER, "1", "10"),
        (AlertType.RIVER, "1", True),
        (AlertType.RIVER, "1", math.nan),
        (AlertType.RIVER, "1", math.inf),
    ],
)
def test_invalid_input_is_rejected_before_any_lookup(entity_type, entity_id, value):
    evaluator, alerts = _evaluator([_configuration(1)])

    with pytest.raises(InvalidInput):
        evaluator.evaluate(entity_type, entity_id, value)
    assert alerts.find_calls == 0
