"""DB-backed lock electing the single process allowed to run scheduled jobs."""
from __future__ import annotations

import logging
import os
import socket
from contextlib import AbstractContextManager
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import db
from app.models.scheduler_lock import SchedulerLock
from app.utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)

LOCK_NAME = "hydrowatch-scheduler"
LOCK_TTL_SECONDS = 300


def _session(db_session: Session | None = None) -> tuple[Session, bool]:
    if db_session is not None:
        return db_session, False
    return db.get_sessionmaker()(), True


def _transaction(session: Session) -> AbstractContextManager:
    return session.begin_nested() if session.in_transaction() else session.begin()


def _owner_id() -> str:
    return f"{socket.gethostname()}-{os.getpid()}"


def _locked_row(session: Session, name: str) -> SchedulerLock | None:
    stmt = select(SchedulerLock).where(SchedulerLock.name == name).with_for_update()
    return session.execute(stmt).scalar_one_or_none()


def try_acquire_scheduler_lock(
    name: str = LOCK_NAME,
    *,
    ttl_seconds: int = LOCK_TTL_SECONDS,
    db_session: Session | None = None,
) -> bool:
    """Take the lock if it is free, expired or already ours; return whether we hold it."""

    session, should_close = _session(db_session)
    owner = _owner_id()
    now = utcnow()
    expires = now + timedelta(seconds=ttl_seconds)

    try:
        with _transaction(session):
            lock = _locked_row(session, name)

            if lock is None:
                try:
                    with session.begin_nested():
                        session.add(SchedulerLock(name=name, owner=owner, acquired_at=now, expires_at=expires))
                except IntegrityError:
                    logger.info("Scheduler lock taken concurrently", extra={"lock": name})
                    return False
                return True

            expires_at = ensure_utc(lock.expires_at) if lock.expires_at is not None else None
            if expires_at is None or expires_at <= now:
                logger.info(
                    "Taking over expired scheduler lock",
                    extra={"lock": name, "previous_owner": lock.owner, "owner": owner},
                )
                lock.owner = owner
                lock.acquired_at = now
                lock.expires_at = expires
                return True

            if lock.owner == owner:
                lock.expires_at = expires
                return True

            return False
    finally:
        if should_close:
            session.close()


def refresh_scheduler_lock(
    name: str = LOCK_NAME, *, ttl_seconds: int = LOCK_TTL_SECONDS, db_session: Session | None = None
) -> bool:
    """Extend the lock TTL when this process owns it."""

    session, should_close = _session(db_session)
    owner = _owner_id()
    try:
        with _transaction(session):
            lock = _locked_row(session, name)
            if lock is None or lock.owner != owner:
                logger.warning("Scheduler lock lost", extra={"lock": name, "owner": owner})
                return False
            lock.expires_at = utcnow() + timedelta(seconds=ttl_seconds)
            return True
    finally:
        if should_close:
            session.close()


def release_scheduler_lock(name: str = LOCK_NAME, *, db_session: Session | None = None) -> None:
    """Delete the lock row if this process owns it."""

    session, should_close = _session(db_session)
    owner = _owner_id()
    try:
        with _transaction(session):
            lock = _locked_row(session, name)
            if lock is not None and lock.owner == owner:
                session.delete(lock)
    finally:
        if should_close:
            session.close()


def describe_scheduler_lock(name: str = LOCK_NAME, *, db_session: Session | None = None) -> dict[str, object]:
    """Return a JSON-friendly description of the lock for the health endpoint."""

    session, should_close = _session(db_session)
    try:
        lock = session.execute(select(SchedulerLock).where(SchedulerLock.name == name)).scalar_one_or_none()
        if lock is None:
            return {"status": "none", "owner": None, "present": False}

        now = utcnow()
        acquired_at = ensure_utc(lock.acquired_at)
        expires_at = ensure_utc(lock.expires_at) if lock.expires_at is not None else None
        expires_in = (expires_at - now).total_seconds() if expires_at else None

        return {
            "status": "owned_by_self" if lock.owner == _owner_id() else "owned_by_other",
            "owner": lock.owner,
            "present": True,
            "age_seconds": (now - acquired_at).total_seconds(),
            "expires_in_seconds": expires_in,
            "stale": expires_in is not None and expires_in < -60,
        }
    finally:
        if should_close:
            session.close()


__all__ = [
    "LOCK_NAME",
    "describe_scheduler_lock",
    "refresh_scheduler_lock",
    "release_scheduler_lock",
    "try_acquire_scheduler_lock",
]
