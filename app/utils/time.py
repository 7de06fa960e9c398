"""Time utilities."""
from datetime import UTC, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_ago(hours: int) -> datetime:
    return utcnow() - timedelta(hours=hours)


__all__ = ["utcnow", "ensure_utc", "hours_ago"]
