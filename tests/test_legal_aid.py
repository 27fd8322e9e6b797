"""Tests for legal-aid applications."""
import pytest
from httpx import AsyncClient

from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2

APPLICATION = {
    "case_description": "I was charged with theft and cannot afford an advocate.",
    "financial_status": {"monthly_income": 8000, "dependants": 3},
    "supporting_documents": ["payslip.pdf"],
}


async def _apply(client: AsyncClient, headers, **overrides):
    resp = await client.post(
        "/api/legal-aid/applications", json={**APPLICATION, **overrides}, headers=headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_application_defaults(client: AsyncClient):
    data = await _apply(client, AUTH_HEADERS)
    assert data["user_id"] == AUTH_HEADERS["X-User-Id"]
    assert data["status"] == "pending"
    assert data["assigned_lawyer_id"] is None
    assert data["financial_status"] == {"monthly_income": 8000, "dependants": 3}


@pytest.mark.asyncio
async def test_applicants_see_only_their_own(client: AsyncClient):
    mine = await _apply(client, AUTH_HEADERS)
    await _apply(client, AUTH_HEADERS_USER2)

    resp = await client.get("/api/legal-aid/applications", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    apps = resp.json()
    assert [a["id"] for a in apps] == [mine["id"]]
    assert apps[0]["user"]["id"] == AUTH_HEADERS["X-User-Id"]


@pytest.mark.asyncio
async def test_admin_sees_all_with_filters(client: AsyncClient, admin_headers):
    first = await _apply(client, AUTH_HEADERS)
    second = await _apply(client, AUTH_HEADERS_USER2)

    resp = await client.get("/api/legal-aid/applications", headers=admin_headers)
    apps = resp.json()
    assert [a["id"] for a in apps] == [second["id"], first["id"]]
    assert apps[0]["user"]["first_name"] == "Brian"

    await client.patch(
        f"/api/legal-aid/applications/{first['id']}",
        json={"status": "approved"},
        headers=admin_headers,
    )
    resp = await client.get(
        "/api/legal-aid/applications", params={"status": "approved"}, headers=admin_headers
    )
    assert [a["id"] for a in resp.json()] == [first["id"]]

    resp = await client.get(
        "/api/legal-aid/applications", params={"limit": 1, "offset": 1}, headers=admin_headers
    )
    assert [a["id"] for a in resp.json()] == [first["id"]]


@pytest.mark.asyncio
async def test_admin_assigns_lawyer(client: AsyncClient, admin_headers, lawyer_headers):
    app_ = await _apply(client, AUTH_HEADERS)

    resp = await client.patch(
        f"/api/legal-aid/applications/{app_['id']}",
        json={"status": "approved", "assigned_lawyer_id": lawyer_headers["X-User-Id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "approved"
    assert data["assigned_lawyer_id"] == lawyer_headers["X-User-Id"]


@pytest.mark.asyncio
async def test_assigning_non_lawyer_is_422(client: AsyncClient, admin_headers):
    app_ = await _apply(client, AUTH_HEADERS)
    resp = await client.patch(
        f"/api/legal-aid/applications/{app_['id']}",
        json={"assigned_lawyer_id": AUTH_HEADERS["X-User-Id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_only_admin_updates(client: AsyncClient, admin_headers):
    app_ = await _apply(client, AUTH_HEADERS)
    resp = await client.patch(
        f"/api/legal-aid/applications/{app_['id']}",
        json={"status": "approved"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 403

    resp = await client.patch(
        "/api/legal-aid/applications/missing", json={"status": "approved"}, headers=admin_headers
    )
    assert resp.status_code == 404
