"""Tests for the generic entity endpoints."""

import uuid

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_list_get_update(admin_client: AsyncClient):
    response = await admin_client.post("/entities/tags", json={"name": "Youth"})
    assert response.status_code == 200
    envelope = response.json()
    assert envelope["success"] is True
    assert envelope["message"] is None
    tag_id = envelope["data"]["id"]

    response = await admin_client.get("/entities/tags")
    assert [t["name"] for t in response.json()["data"]] == ["Youth"]

    response = await admin_client.patch(f"/entities/tags/{tag_id}", json={"color": "#000000"})
    assert response.json()["data"]["color"] == "#000000"

    response = await admin_client.get(f"/entities/tags/{tag_id}")
    assert response.json()["data"]["name"] == "Youth"


@pytest.mark.asyncio
async def test_failures_are_reported_in_envelope(admin_client: AsyncClient):
    response = await admin_client.get(f"/entities/people/{uuid.uuid4()}")
    assert response.status_code == 200
    assert response.json() == {"success": False, "data": None, "message": "Person not found"}

    response = await admin_client.post("/entities/people", json={"first_name": "Ada"})
    body = response.json()
    assert body["success"] is False
    assert "last_name" in body["message"]


@pytest.mark.asyncio
async def test_unknown_entity_type(admin_client: AsyncClient):
    response = await admin_client.get("/entities/users")
    assert response.status_code == 404
