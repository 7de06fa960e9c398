"""Notification fan-out for triggered alerts and the delivery loop that drains it."""
from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.text import MIMEText
from typing import Mapping, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.models.alert import Alert
from app.models.alert_configuration import NotificationChannel
from app.models.notification import Notification, NotificationStatus
from app.models.user import User
from app.services.alert_engine import TriggeredAlert
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class NotificationDeliveryError(Exception):
    """A channel could not deliver a notification."""


class ChannelSender(Protocol):
    def send(self, notification: Notification, user: User) -> None:
        ...


class EmailChannel:
    """Send notifications by SMTP (STARTTLS on 587, implicit TLS on 465)."""

    def __init__(
        self,
        smtp_server: str,
        smtp_port: int = 587,
        smtp_username: str | None = None,
        smtp_password: str | None = None,
        from_address: str | None = None,
        use_tls: bool = True,
    ) -> None:
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_address = from_address or f"alerts@{smtp_server}"
        self.use_tls = use_tls

    def _message(self, notification: Notification, recipient: str) -> MIMEText:
        msg = MIMEText(notification.message, "plain")
        msg["Subject"] = notification.subject or "HydroWatch notification"
        msg["From"] = self.from_address
        msg["To"] = recipient
        return msg

    def send(self, notification: Notification, user: User) -> None:
        if not user.email:
            raise NotificationDeliveryError("User has no email address")
        msg = self._message(notification, user.email)

        if self.smtp_port == 465:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, context=context) as server:
                self._deliver(server, user.email, msg)
        else:
            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                self._deliver(server, user.email, msg)

    def _deliver(self, server: smtplib.SMTP, recipient: str, msg: MIMEText) -> None:
        if self.smtp_username and self.smtp_password:
            server.login(self.smtp_username, self.smtp_password)
        server.sendmail(self.from_address, [recipient], msg.as_string())


class LogChannel:
    """Record delivery through the application log (no external provider wired)."""

    def __init__(self, channel: NotificationChannel) -> None:
        self.channel = channel

    def send(self, notification: Notification, user: User) -> None:
        if self.channel == NotificationChannel.SMS and not user.phone_number:
            raise NotificationDeliveryError("User has no phone number")
        if self.channel == NotificationChannel.EMAIL and not user.email:
            raise NotificationDeliveryError("User has no email address")
        logger.info(
            "Notification delivered",
            extra={
                "notification_id": notification.id,
                "channel": self.channel.value,
                "user_id": user.id,
                "subject": notification.subject,
            },
        )


def build_senders(settings: Settings | None = None) -> dict[NotificationChannel, ChannelSender]:
    settings = settings or get_settings()
    senders: dict[NotificationChannel, ChannelSender] = {
        NotificationChannel.SMS: LogChannel(NotificationChannel.SMS),
        NotificationChannel.PUSH: LogChannel(NotificationChannel.PUSH),
        NotificationChannel.EMAIL: LogChannel(NotificationChannel.EMAIL),
    }
    if settings.SMTP_HOST:
        senders[NotificationChannel.EMAIL] = EmailChannel(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USERNAME,
            settings.SMTP_PASSWORD,
            settings.NOTIFICATION_FROM_ADDRESS,
            settings.SMTP_USE_TLS,
        )
    return senders


def alert_subject(alert: Alert) -> str:
    return f"[{alert.severity.value.upper()}] {alert.entity_type.value} alert: {alert.entity_name}"


class NotificationDispatcher:
    """Queue one pending notification per configured channel for each newly opened alert.

    Rows are flushed, not committed, so the caller commits them together
    with the alerts they announce.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def dispatch(self, triggered: Sequence[TriggeredAlert]) -> list[Notification]:
        queued: list[Notification] = []
        for item in triggered:
            for channel in item.configuration.channels:
                queued.append(
                    Notification(
                        user_id=item.configuration.user_id,
                        alert_id=item.alert.id,
                        channel=NotificationChannel(channel),
                        subject=alert_subject(item.alert),
                        message=item.alert.message,
                        status=NotificationStatus.PENDING,
                    )
                )
        if not queued:
            return queued

        self.db.add_all(queued)
        self.db.flush()
        logger.info(
            "Notifications queued",
            extra={"count": len(queued), "alert_ids": [item.alert.id for item in triggered]},
        )
        return queued


def deliver_pending_notifications(
    db: Session,
    limit: int = 100,
    senders: Mapping[NotificationChannel, ChannelSender] | None = None,
) -> dict[str, int]:
    """Send up to ``limit`` pending notifications, oldest first, marking each sent or failed."""

    senders = senders if senders is not None else build_senders()
    pending = db.scalars(
        select(Notification)
        .where(Notification.status == NotificationStatus.PENDING)
        .order_by(Notification.id)
        .limit(limit)
    ).all()

    sent = failed = 0
    for notification in pending:
        user = db.get(User, notification.user_id)
        sender = senders.get(notification.channel)
        try:
            if user is None or not user.is_active:
                raise NotificationDeliveryError("Recipient is missing or inactive")
            if sender is None:
                raise NotificationDeliveryError(f"No sender for channel {notification.channel.value}")
            sender.send(notification, user)
        except (NotificationDeliveryError, OSError) as exc:
            notification.status = NotificationStatus.FAILED
            notification.error_message = str(exc) or exc.__class__.__name__
            failed += 1
            logger.warning(
                "Notification delivery failed",
                extra={"notification_id": notification.id, "channel": notification.channel.value, "error": str(exc)},
            )
        else:
            notification.status = NotificationStatus.SENT
            notification.sent_at = utcnow()
            notification.error_message = None
            sent += 1
        db.commit()

    return {"processed": len(pending), "sent": sent, "failed": failed}


def notification_history(db: Session, user_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt).all())


def default_preferences(user_id: int) -> dict[str, object]:
    return {
        "user_id": user_id,
        "email_enabled": True,
        "sms_enabled": True,
        "push_enabled": True,
        "quiet_hours": None,
    }


def queue_test_notification(db: Session, user: User, channel: NotificationChannel, message: str) -> Notification:
    notification = Notification(
        user_id=user.id,
        alert_id=None,
        channel=channel,
        subject="Test Notification",
        message=message,
        status=NotificationStatus.PENDING,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    logger.info("Test notification queued", extra={"user_id": user.id, "channel": channel.value})
    return notification


__all__ = [
    "EmailChannel",
    "LogChannel",
    "NotificationDeliveryError",
    "NotificationDispatcher",
    "alert_subject",
    "build_senders",
    "default_preferences",
    "deliver_pending_notifications",
    "notification_history",
    "queue_test_notification",
]
