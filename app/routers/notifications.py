"""Notification endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.runtime_state import record_dispatch_run
from app.db import get_db
from app.models.api_key import ApiScope
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import (
    DeliveryReport,
    NotificationPreferences,
    NotificationRead,
    SendTestNotification,
)
from app.security import require_api_key, require_scope, require_user
from app.services import notifications as notifications_service
from app.utils.time import utcnow

router = APIRouter(prefix="/notifications", tags=["notifications"], dependencies=[Depends(require_api_key)])


@router.get("/history", response_model=list[NotificationRead])
def get_history(
    limit: int = Query(default=notifications_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> list[Notification]:
    return notifications_service.notification_history(db, user.id, limit)


@router.get("/preferences", response_model=NotificationPreferences)
def get_preferences(user: User = Depends(require_user)) -> dict:
    return notifications_service.default_preferences(user.id)


@router.post("/test", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def send_test_notification(
    payload: SendTestNotification,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> Notification:
    """Queue a test message to the caller; the delivery job sends it."""

    return notifications_service.queue_test_notification(db, user, payload.channel, payload.message)


@router.post(
    "/deliver",
    response_model=DeliveryReport,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_scope({ApiScope.admin}))],
)
def deliver_pending(db: Session = Depends(get_db)) -> dict[str, int]:
    """Run one delivery batch now instead of waiting for the scheduler."""

    stats = notifications_service.deliver_pending_notifications(db, limit=get_settings().NOTIFICATION_BATCH_SIZE)
    record_dispatch_run(at=utcnow().isoformat(), **stats)
    return stats
