import pytest
from uuid import uuid4

from app.models.audit import AuditLog


@pytest.mark.anyio("asyncio")
async def test_user_creation_audit_masks_contact_details(client, admin_headers, db_session):
    payload = {
        "username": f"audit-user-{uuid4().hex[:6]}",
        "email": f"audit-user-{uuid4().hex[:6]}@example.com",
        "phone_number": "+919876543210",
    }
    resp = await client.post("/users", json=payload, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["phone_number"] == "+919876543210"

    db_session.expire_all()
    audit = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "CREATE_USER")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert audit is not None
    assert audit.actor.startswith("apikey:")
    assert audit.data_json["email"] == "***@example.com"
    assert audit.data_json["phone_number"] == "***10"


@pytest.mark.anyio("asyncio")
async def test_duplicate_user_is_rejected(client, admin_headers, make_user):
    existing = make_user()
    resp = await client.post(
        "/users",
        json={"username": existing.username, "email": f"other-{uuid4().hex[:6]}@example.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "USER_CREATE_FAILED"


@pytest.mark.anyio("asyncio")
async def test_get_and_list_users(client, admin_headers, viewer_headers, make_user):
    user = make_user()

    resp = await client.get(f"/users/{user.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == user.username

    listed = (await client.get("/users", headers=admin_headers)).json()
    assert user.id in {item["id"] for item in listed}

    assert (await client.get("/users/999999", headers=admin_headers)).status_code == 404
    assert (await client.get("/users", headers=viewer_headers)).status_code == 403
