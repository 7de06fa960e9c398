"""Alert configuration and alert schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.alert import AlertSeverity
from app.models.alert_configuration import AlertType, NotificationChannel, ThresholdOperator


def _dedupe_channels(value: list[NotificationChannel] | None) -> list[NotificationChannel] | None:
    if value is None:
        return None
    seen: list[NotificationChannel] = []
    for channel in value:
        if channel not in seen:
            seen.append(channel)
    return seen


class AlertConfigurationCreate(BaseModel):
    entity_type: AlertType
    entity_id: str = Field(min_length=1, max_length=64)
    threshold_operator: ThresholdOperator
    threshold_value: float = Field(allow_inf_nan=False)
    channels: list[NotificationChannel] = Field(min_length=1)
    enabled: bool = True

    @field_validator("entity_id")
    @classmethod
    def _strip_entity_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("entity_id cannot be blank")
        return cleaned

    @field_validator("channels")
    @classmethod
    def _unique_channels(cls, value: list[NotificationChannel]) -> list[NotificationChannel]:
        return _dedupe_channels(value)


class AlertConfigurationUpdate(BaseModel):
    """Partial update; the watched entity cannot be changed."""

    threshold_operator: ThresholdOperator | None = None
    threshold_value: float | None = Field(default=None, allow_inf_nan=False)
    channels: list[NotificationChannel] | None = Field(default=None, min_length=1)
    enabled: bool | None = None

    @field_validator("channels")
    @classmethod
    def _unique_channels(cls, value: list[NotificationChannel] | None) -> list[NotificationChannel] | None:
        return _dedupe_channels(value)


class AlertConfigurationRead(BaseModel):
    id: int
    user_id: int
    entity_type: AlertType
    entity_id: str
    threshold_operator: ThresholdOperator
    threshold_value: float
    channels: list[NotificationChannel]
    enabled: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AlertRead(BaseModel):
    id: int
    configuration_id: int | None
    entity_type: AlertType
    entity_id: str
    entity_name: str
    severity: AlertSeverity
    message: str
    triggered_at: datetime
    resolved_at: datetime | None
    acknowledged: bool
    acknowledged_by: int | None
    acknowledged_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ReadingEvaluate(BaseModel):
    """An explicit reading to run through the threshold evaluator."""

    entity_type: AlertType
    entity_id: str = Field(min_length=1, max_length=64)
    value: float = Field(allow_inf_nan=False)


class EvaluationResult(BaseModel):
    alerts: list[AlertRead]
    notifications_queued: int = 0
