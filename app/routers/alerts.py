"""Alert configuration and alert endpoints."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.alert import Alert
from app.models.alert_configuration import AlertConfiguration
from app.models.api_key import ApiScope
from app.models.user import User
from app.schemas.alert import (
    AlertConfigurationCreate,
    AlertConfigurationRead,
    AlertConfigurationUpdate,
    AlertRead,
    EvaluationResult,
    ReadingEvaluate,
)
from app.security import require_api_key, require_scope, require_user
from app.services import alerts as alerts_service

router = APIRouter(prefix="/alerts", tags=["alerts"], dependencies=[Depends(require_api_key)])


@router.post(
    "/configurations",
    response_model=AlertConfigurationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_configuration(
    payload: AlertConfigurationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> AlertConfiguration:
    return alerts_service.create_configuration(db, user, payload)


@router.get("/configurations", response_model=list[AlertConfigurationRead])
def list_configurations(
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> list[AlertConfiguration]:
    return alerts_service.list_configurations(db, user)


@router.put("/configurations/{configuration_id}", response_model=AlertConfigurationRead)
def update_configuration(
    configuration_id: int,
    payload: AlertConfigurationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> AlertConfiguration:
    return alerts_service.update_configuration(db, user, configuration_id, payload)


@router.delete(
    "/configurations/{configuration_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_configuration(
    configuration_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> Response:
    alerts_service.delete_configuration(db, user, configuration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/active", response_model=list[AlertRead])
def get_active_alerts(
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> list[Alert]:
    return alerts_service.active_alerts(db, user)


@router.get("/history", response_model=list[AlertRead])
def get_alert_history(
    limit: int = Query(default=alerts_service.DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> list[Alert]:
    return alerts_service.alert_history(db, user, limit)


@router.post(
    "/evaluate",
    response_model=EvaluationResult,
    dependencies=[Depends(require_scope({ApiScope.operator}))],
)
def evaluate_reading(payload: ReadingEvaluate, db: Session = Depends(get_db)) -> EvaluationResult:
    """Run an explicit reading through the threshold evaluator."""

    triggered, queued = alerts_service.evaluate_reading(db, payload.entity_type, payload.entity_id, payload.value)
    return EvaluationResult(
        alerts=[AlertRead.model_validate(item.alert) for item in triggered],
        notifications_queued=queued,
    )


@router.post("/{alert_id}/acknowledge", response_model=AlertRead)
def acknowledge_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> Alert:
    return alerts_service.acknowledge_alert(db, user, alert_id)


@router.post("/{alert_id}/resolve", response_model=AlertRead)
def resolve_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
) -> Alert:
    return alerts_service.resolve_alert(db, user, alert_id)
