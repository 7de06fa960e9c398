"""Alert configuration CRUD and alert lifecycle over HTTP."""
import pytest
from sqlalchemy import select

from app.models import Alert, AlertConfiguration, AuditLog, Notification, NotificationStatus
from app.models.api_key import ApiScope


def _config_payload(**overrides):
    payload = {
        "entity_type": "river",
        "entity_id": "1",
        "threshold_operator": "gt",
        "threshold_value": 300,
        "channels": ["email", "sms"],
    }
    payload.update(overrides)
    return payload


@pytest.mark.anyio
async def test_create_and_list_configuration(client, user, user_headers, db_session):
    resp = await client.post("/alerts/configurations", json=_config_payload(), headers=user_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["user_id"] == user.id
    assert body["channels"] == ["email", "sms"]
    assert body["enabled"] is True

    listed = await client.get("/alerts/configurations", headers=user_headers)
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()] == [body["id"]]

    audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "ALERT_CONFIG_CREATED")).first()
    assert audit is not None
    assert audit.actor == f"user:{user.id}"


@pytest.mark.anyio
async def test_configuration_requires_linked_user(client, viewer_headers):
    resp = await client.post("/alerts/configurations", json=_config_payload(), headers=viewer_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "USER_REQUIRED"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides",
    [
        {"entity_type": "volcano"},
        {"threshold_operator": "gte"},
        {"entity_id": "   "},
        {"channels": []},
        {"channels": ["pigeon"]},
    ],
)
async def test_invalid_configuration_is_rejected(client, user_headers, overrides):
    resp = await client.post("/alerts/configurations", json=_config_payload(**overrides), headers=user_headers)
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_update_and_delete_configuration(client, user_headers, db_session):
    created = (await client.post("/alerts/configurations", json=_config_payload(), headers=user_headers)).json()

    resp = await client.put(
        f"/alerts/configurations/{created['id']}",
        json={"threshold_value": 250, "enabled": False, "channels": ["push", "push"]},
        headers=user_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["threshold_value"] == 250
    assert body["enabled"] is False
    assert body["channels"] == ["push"]
    assert body["threshold_operator"] == "gt"

    resp = await client.delete(f"/alerts/configurations/{created['id']}", headers=user_headers)
    assert resp.status_code == 204
    assert db_session.get(AlertConfiguration, created["id"]) is None


@pytest.mark.anyio
async def test_other_users_configuration_is_not_found(client, make_user, headers_for, user_headers):
    created = (await client.post("/alerts/configurations", json=_config_payload(), headers=user_headers)).json()
    stranger_headers = headers_for(ApiScope.viewer, make_user())

    resp = await client.put(
        f"/alerts/configurations/{created['id']}", json={"threshold_value": 1}, headers=stranger_headers
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "ALERT_CONFIG_NOT_FOUND"

    resp = await client.delete(f"/alerts/configurations/{created['id']}", headers=stranger_headers)
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_evaluate_queues_notifications_and_deduplicates(
    client, user, user_headers, operator_headers, make_station, db_session
):
    station = make_station()
    await client.post(
        "/alerts/configurations",
        json=_config_payload(entity_id=str(station.id), threshold_value=300),
        headers=user_headers,
    )

    evaluation = {"entity_type": "river", "entity_id": str(station.id), "value": 310}
    resp = await client.post("/alerts/evaluate", json=evaluation, headers=operator_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["notifications_queued"] == 2
    assert len(body["alerts"]) == 1
    alert = body["alerts"][0]
    assert alert["severity"] == "info"
    assert alert["entity_name"] == station.name
    assert alert["message"] == "river value exceeded threshold: 310 (threshold: 300)"

    resp = await client.post("/alerts/evaluate", json={**evaluation, "value": 320}, headers=operator_headers)
    assert resp.json() == {"alerts": [], "notifications_queued": 0}

    notifications = db_session.scalars(select(Notification).where(Notification.user_id == user.id)).all()
    assert sorted(n.channel.value for n in notifications) == ["email", "sms"]
    assert all(n.status == NotificationStatus.PENDING for n in notifications)
    assert all(n.alert_id == alert["id"] for n in notifications)


@pytest.mark.anyio
async def test_evaluate_requires_operator_scope(client, viewer_headers):
    resp = await client.post(
        "/alerts/evaluate",
        json={"entity_type": "dam", "entity_id": "1", "value": 90},
        headers=viewer_headers,
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "INSUFFICIENT_SCOPE"


@pytest.mark.anyio
async def test_acknowledge_and_resolve_lifecycle(client, user_headers, operator_headers, db_session):
    await client.post(
        "/alerts/configurations",
        json=_config_payload(entity_type="dam", entity_id="9", threshold_operator="gt", threshold_value=90),
        headers=user_headers,
    )
    evaluation = {"entity_type": "dam", "entity_id": "9", "value": 95}
    alert_id = (await client.post("/alerts/evaluate", json=evaluation, headers=operator_headers)).json()["alerts"][0][
        "id"
    ]

    active = (await client.get("/alerts/active", headers=user_headers)).json()
    assert [item["id"] for item in active] == [alert_id]

    resp = await client.post(f"/alerts/{alert_id}/acknowledge", headers=user_headers)
    assert resp.status_code == 200
    acknowledged = resp.json()
    assert acknowledged["acknowledged"] is True
    assert acknowledged["acknowledged_by"] is not None
    assert acknowledged["resolved_at"] is None

    resp = await client.post(f"/alerts/{alert_id}/resolve", headers=user_headers)
    assert resp.status_code == 200
    resolved_at = resp.json()["resolved_at"]
    assert resolved_at is not None

    # Resolving twice keeps the original timestamp.
    again = await client.post(f"/alerts/{alert_id}/resolve", headers=user_headers)
    assert again.json()["resolved_at"] == resolved_at

    assert (await client.get("/alerts/active", headers=user_headers)).json() == []
    history = (await client.get("/alerts/history", headers=user_headers)).json()
    assert [item["id"] for item in history] == [alert_id]

    reopened = (await client.post("/alerts/evaluate", json=evaluation, headers=operator_headers)).json()
    assert len(reopened["alerts"]) == 1
    assert reopened["alerts"][0]["id"] != alert_id
    assert len(db_session.scalars(select(Alert).where(Alert.entity_id == "9")).all()) == 2


@pytest.mark.anyio
async def test_alert_of_another_user_is_not_found(client, make_user, headers_for, user_headers, operator_headers):
    await client.post(
        "/alerts/configurations",
        json=_config_payload(entity_type="groundwater", entity_id="3", threshold_operator="lt", threshold_value=5),
        headers=user_headers,
    )
    evaluation = {"entity_type": "groundwater", "entity_id": "3", "value": 2}
    alert_id = (await client.post("/alerts/evaluate", json=evaluation, headers=operator_headers)).json()["alerts"][0][
        "id"
    ]

    stranger_headers = headers_for(ApiScope.viewer, make_user())
    resp = await client.post(f"/alerts/{alert_id}/acknowledge", headers=stranger_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "ALERT_NOT_FOUND"
    assert (await client.get("/alerts/active", headers=stranger_headers)).json() == []


@pytest.mark.anyio
async def test_blank_entity_id_reading_is_rejected(client, operator_headers):
    resp = await client.post(
        "/alerts/evaluate",
        json={"entity_type": "river", "entity_id": "   ", "value": 1},
        headers=operator_headers,
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_READING"
