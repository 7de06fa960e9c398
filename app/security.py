"""Security dependencies for API key validation and scope enforcement."""
from __future__ import annotations

from typing import Callable, Set

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import DEV_API_KEY, DEV_API_KEY_ALLOWED, ENV
from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.user import User
from app.utils.apikey import LEGACY_TOKEN, find_valid_key
from app.utils.audit import log_audit
from app.utils.errors import error_response
from app.utils.time import utcnow


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def _legacy_key(db: Session) -> ApiKey:
    """Return a transient admin key standing in for the dev bootstrap token."""

    if not DEV_API_KEY_ALLOWED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("LEGACY_KEY_FORBIDDEN", "Legacy dev key disabled."),
        )
    now = utcnow()
    log_audit(
        db,
        actor="legacy-apikey",
        action="LEGACY_API_KEY_USED",
        entity="ApiKey",
        entity_id=0,
        data={"env": ENV},
    )
    db.commit()
    return ApiKey(
        id=0,
        name="__legacy__",
        prefix="legacy",
        key_hash="legacy",
        scope=ApiScope.admin,
        is_active=True,
        created_at=now,
        expires_at=None,
        last_used_at=now,
    )


def require_api_key(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> ApiKey:
    """Validate API key tokens and return the corresponding row."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_API_KEY", "API key required."),
        )

    if token == DEV_API_KEY:
        return _legacy_key(db)

    key = find_valid_key(db, token)
    if key == LEGACY_TOKEN:
        return _legacy_key(db)

    if not isinstance(key, ApiKey) or not key.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNAUTHORIZED", "Invalid or expired API key"),
        )

    key.last_used_at = utcnow()
    db.commit()
    return key


def require_scope(allowed: Set[ApiScope]) -> Callable:
    """Ensure the presented key holds one of the allowed scopes (admin always passes)."""

    if not allowed:
        raise RuntimeError("require_scope needs a non-empty set of ApiScope")

    def _dep(key: ApiKey = Depends(require_api_key)) -> ApiKey:
        if key.scope == ApiScope.admin or key.scope in allowed:
            return key
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response(
                "INSUFFICIENT_SCOPE",
                f"Requires one of: {sorted(scope.value for scope in allowed)}",
            ),
        )

    return _dep


def require_user(
    api_key: ApiKey = Depends(require_api_key),
    db: Session = Depends(get_db),
) -> User:
    """Return the active user the API key belongs to."""

    user_id = getattr(api_key, "user_id", None)
    user = db.get(User, user_id) if user_id is not None else None
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response("USER_REQUIRED", "This API key is not linked to an active user."),
        )
    return user


__all__ = ["require_api_key", "require_scope", "require_user"]
