"""Tests for session context and role checks."""

import uuid

import pytest
from httpx import AsyncClient

from flock.core.config import settings
from flock.db.enums import Role


@pytest.mark.asyncio
async def test_missing_session_is_401(client: AsyncClient):
    response = await client.get("/people")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_role_is_403(client: AsyncClient, headers_for):
    response = await client.get("/people", headers=headers_for("pastor"))
    assert response.status_code == 403
    assert "Unknown role" in response.json()["detail"]


@pytest.mark.asyncio
async def test_invalid_org_header_is_401(client: AsyncClient, headers_for):
    headers = headers_for(Role.ADMIN)
    headers["X-Org-Id"] = "not-a-uuid"
    response = await client.get("/people", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_org_is_403(client: AsyncClient, headers_for):
    headers = headers_for(Role.ADMIN)
    headers["X-Org-Id"] = str(uuid.uuid4())
    response = await client.get("/people", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Unknown organization"


@pytest.mark.asyncio
async def test_role_header_is_case_insensitive(client: AsyncClient, headers_for):
    response = await client.get("/people", headers=headers_for("ADMIN"))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_dev_bypass_uses_settings(client: AsyncClient, db, monkeypatch):
    from flock.db.models import Organization

    db.add(Organization(id=uuid.UUID(settings.DEV_ORG_ID), name="Dev", slug="dev"))
    db.commit()
    monkeypatch.setattr(settings, "DEV_BYPASS_AUTH", True)

    response = await client.get("/people")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_mutations_require_csrf_header(client: AsyncClient, headers_for):
    response = await client.post(
        "/tags",
        json={"name": "Youth"},
        headers=headers_for(Role.ADMIN, csrf=False),
    )
    assert response.status_code == 403
    assert "CSRF" in response.json()["detail"]


@pytest.mark.asyncio
async def test_viewer_can_read_but_not_write(viewer_client: AsyncClient):
    assert (await viewer_client.get("/people")).status_code == 200
    response = await viewer_client.post("/people", json={"first_name": "A", "last_name": "B"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_members_cannot_manage_profile_fields(member_client: AsyncClient):
    response = await member_client.get("/profile-fields")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_entities_are_staff_only(member_client: AsyncClient):
    response = await member_client.get("/entities/people")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
