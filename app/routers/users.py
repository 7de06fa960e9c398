"""User endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiKey, ApiScope
from app.models.user import User
from app.schemas.user import UserCreate, UserRead
from app.security import require_scope
from app.utils.audit import actor_from_api_key, log_audit
from app.utils.errors import error_response

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> User:
    """Create a new user."""

    user = User(**payload.model_dump())
    try:
        with db.begin_nested():
            db.add(user)
            db.flush()
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("USER_CREATE_FAILED", "Username or email already registered."),
        ) from exc

    log_audit(
        db,
        actor=actor_from_api_key(api_key, fallback="apikey:unknown"),
        action="CREATE_USER",
        entity="User",
        entity_id=user.id,
        data={"username": user.username, "email": user.email, "phone_number": user.phone_number},
    )

    db.commit()
    db.refresh(user)
    return user


@router.get("", response_model=list[UserRead])
def list_users(
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)).all())


@router.get(
    "/{user_id}",
    response_model=UserRead,
)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    api_key: ApiKey = Depends(require_scope({ApiScope.admin})),
) -> User:
    """Retrieve a user by identifier."""

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_response("USER_NOT_FOUND", "User not found."))

    log_audit(
        db,
        actor=actor_from_api_key(api_key, fallback="apikey:unknown"),
        action="READ_USER",
        entity="User",
        entity_id=user.id,
        data={"reason": "api_read"},
    )
    db.commit()
    return user
