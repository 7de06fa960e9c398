"""Notification schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.alert_configuration import NotificationChannel
from app.models.notification import NotificationStatus


class NotificationRead(BaseModel):
    id: int
    user_id: int
    alert_id: int | None
    channel: NotificationChannel
    subject: str | None
    message: str
    status: NotificationStatus
    sent_at: datetime | None
    error_message: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationPreferences(BaseModel):
    user_id: int
    email_enabled: bool = True
    sms_enabled: bool = True
    push_enabled: bool = True
    quiet_hours: str | None = None


class SendTestNotification(BaseModel):
    channel: NotificationChannel
    message: str = Field(default="This is a test notification", min_length=1, max_length=1000)


class DeliveryReport(BaseModel):
    processed: int
    sent: int
    failed: int
