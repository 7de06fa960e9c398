"""Background jobs run by the lifespan scheduler."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.runtime_state import record_dispatch_run
from app.db import get_sessionmaker
from app.services.notifications import deliver_pending_notifications
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


def deliver_notifications_once() -> dict[str, int]:
    """Drain one batch of pending notifications."""

    db: Session = get_sessionmaker()()
    try:
        stats = deliver_pending_notifications(db, limit=get_settings().NOTIFICATION_BATCH_SIZE)
    finally:
        db.close()

    record_dispatch_run(at=utcnow().isoformat(), **stats)
    if stats["processed"]:
        logger.info("Notification delivery run finished", extra=stats)
    return stats
