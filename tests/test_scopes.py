"""Scope enforcement regression tests."""
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.models.api_key import ApiKey
from app.models.audit import AuditLog


@pytest.mark.anyio
async def test_viewer_cannot_manage_apikeys(client, viewer_headers):
    response = await client.get("/apikeys/1", headers=viewer_headers)
    assert response.status_code == 403
    payload = response.json()
    assert payload["error"]["code"] == "INSUFFICIENT_SCOPE"


@pytest.mark.anyio
async def test_operator_cannot_create_stations(client, operator_headers):
    payload = {
        "name": "Gauge",
        "river_name": "Krishna",
        "location": {"lat": 16.5, "lng": 80.6},
        "danger_level": 10,
        "flood_level": 12,
    }
    response = await client.post("/river/stations", json=payload, headers=operator_headers)
    assert response.status_code == 403


@pytest.mark.anyio
async def test_admin_passes_operator_checks(client, admin_headers, make_dam):
    dam = make_dam()
    response = await client.post("/dams/capacity", json={"dam_id": dam.id, "storage": 10}, headers=admin_headers)
    assert response.status_code == 201


@pytest.mark.anyio
async def test_invalid_key_is_rejected(client):
    response = await client.get("/dams", headers={"X-API-Key": "not-a-real-key"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.anyio
async def test_admin_can_create_and_revoke_key(client, admin_headers, make_user, db_session):
    owner = make_user()
    response = await client.post(
        "/apikeys",
        json={"name": f"ingest-{uuid4().hex[:6]}", "scope": "operator", "user_id": owner.id},
        headers=admin_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["user_id"] == owner.id
    assert created["key"].startswith("hw_")

    # The minted key authenticates straight away.
    usable = await client.get("/dams", headers={"Authorization": f"Bearer {created['key']}"})
    assert usable.status_code == 200

    duplicate = await client.post(
        "/apikeys", json={"name": created["name"], "scope": "viewer"}, headers=admin_headers
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["code"] == "APIKEY_EXISTS"

    revoked = await client.delete(f"/apikeys/{created['id']}", headers=admin_headers)
    assert revoked.status_code == 204
    assert db_session.get(ApiKey, created["id"]).is_active is False

    again = await client.delete(f"/apikeys/{created['id']}", headers=admin_headers)
    assert again.status_code == 204
    actions = db_session.scalars(
        select(AuditLog.action).where(AuditLog.entity == "ApiKey", AuditLog.entity_id == created["id"])
    ).all()
    assert set(actions) >= {"CREATE_API_KEY", "REVOKE_API_KEY", "REVOKE_API_KEY_NOOP"}

    rejected = await client.get("/dams", headers={"Authorization": f"Bearer {created['key']}"})
    assert rejected.status_code == 401


@pytest.mark.anyio
async def test_key_for_unknown_user_is_rejected(client, admin_headers):
    response = await client.post(
        "/apikeys", json={"name": f"ghost-{uuid4().hex[:6]}", "scope": "viewer", "user_id": 999999}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.anyio
async def test_legacy_key_rejected_outside_dev(monkeypatch, client):
    monkeypatch.setattr("app.security.DEV_API_KEY_ALLOWED", False, raising=False)
    response = await client.get("/dams", headers={"Authorization": "Bearer test-secret-key"})
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "LEGACY_KEY_FORBIDDEN"


@pytest.mark.anyio
async def test_legacy_key_usage_is_audited(client, db_session):
    response = await client.get("/dams", headers={"Authorization": "Bearer test-secret-key"})
    assert response.status_code == 200
    audit_entry = db_session.execute(
        select(AuditLog).where(AuditLog.action == "LEGACY_API_KEY_USED").order_by(AuditLog.at.desc())
    ).scalars().first()
    assert audit_entry is not None
    assert audit_entry.data_json.get("env") == "test"
