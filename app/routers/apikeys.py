"""API key management endpoints."""
from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.user import User
from app.security import require_scope
from app.utils.apikey import gen_key
from app.utils.audit import actor_from_api_key, log_audit
from app.utils.errors import error_response
from app.utils.time import utcnow

router = APIRouter(prefix="/apikeys", tags=["apikeys"])


# ------ Schemas ------

class CreateKeyIn(BaseModel):
    """Payload to mint a new key; the raw value is generated server-side."""

    name: str
    scope: ApiScope
    user_id: int | None = Field(default=None, gt=0)
    days_valid: int | None = Field(default=90, gt=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()


class ApiKeyCreateOut(BaseModel):
    """Returned once by POST /apikeys; the raw key is never shown again."""

    id: int
    name: str
    scope: ApiScope
    user_id: int | None
    key: str
    expires_at: datetime | None


class ApiKeyRead(BaseModel):
    id: int
    name: str
    prefix: str
    scope: ApiScope
    user_id: int | None
    is_active: bool
    created_at: datetime
    expires_at: datetime | None
    last_used_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


def _get_key_or_404(db: Session, api_key_id: int) -> ApiKey:
    row = db.get(ApiKey, api_key_id)
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("APIKEY_NOT_FOUND", "API key not found."),
        )
    return row


# ------ Routes ------

@router.post(
    "",
    response_model=ApiKeyCreateOut,
    status_code=status.HTTP_201_CREATED,
)
def create_api_key(
    payload: CreateKeyIn,
    db: Session = Depends(get_db),
    admin_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> ApiKeyCreateOut:
    if payload.user_id is not None and db.get(User, payload.user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("USER_NOT_FOUND", "User not found."),
        )

    raw, prefix, key_hash = gen_key()
    expires_at = utcnow() + timedelta(days=payload.days_valid) if payload.days_valid else None
    row = ApiKey(
        name=payload.name,
        prefix=prefix,
        key_hash=key_hash,
        scope=payload.scope,
        user_id=payload.user_id,
        expires_at=expires_at,
        is_active=True,
    )
    try:
        with db.begin_nested():
            db.add(row)
            db.flush()
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("APIKEY_EXISTS", "Key name already exists."),
        ) from exc

    log_audit(
        db,
        actor=actor_from_api_key(admin_key, fallback="apikey:unknown"),
        action="CREATE_API_KEY",
        entity="ApiKey",
        entity_id=row.id,
        data={"name": row.name, "scope": row.scope.value, "user_id": row.user_id},
    )
    db.commit()
    db.refresh(row)

    return ApiKeyCreateOut(
        id=row.id,
        name=row.name,
        scope=row.scope,
        user_id=row.user_id,
        key=raw,
        expires_at=row.expires_at,
    )


@router.get(
    "/{api_key_id}",
    response_model=ApiKeyRead,
    dependencies=[Depends(require_scope({ApiScope.admin}))],
)
def get_apikey(api_key_id: int, db: Session = Depends(get_db)) -> ApiKey:
    return _get_key_or_404(db, api_key_id)


@router.delete(
    "/{api_key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def revoke_apikey(
    api_key_id: int,
    db: Session = Depends(get_db),
    admin_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> Response:
    row = _get_key_or_404(db, api_key_id)
    actor = actor_from_api_key(admin_key, fallback="apikey:unknown")

    if not row.is_active:
        log_audit(db, actor=actor, action="REVOKE_API_KEY_NOOP", entity="ApiKey", entity_id=api_key_id)
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    row.is_active = False
    log_audit(db, actor=actor, action="REVOKE_API_KEY", entity="ApiKey", entity_id=api_key_id, data={"name": row.name})
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
