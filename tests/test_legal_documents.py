"""Tests for the legal document library."""
import pytest
from httpx import AsyncClient

from tests.conftest import AUTH_HEADERS


def _document(**overrides):
    doc = {
        "title": "Article 49: Rights of arrested persons",
        "content": "An arrested person has the right to be informed promptly of the reason.",
        "category": "constitutional",
        "tags": ["arrest", "bill of rights"],
        "is_official": True,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
async def test_create_legal_document(client: AsyncClient, lawyer_headers):
    resp = await client.post("/api/legal-documents", json=_document(), headers=lawyer_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["difficulty_level"] == 1
    assert data["language"] == "en"
    assert data["tags"] == ["arrest", "bill of rights"]
    assert data["is_official"] is True


@pytest.mark.asyncio
async def test_citizen_cannot_publish(client: AsyncClient):
    resp = await client.post("/api/legal-documents", json=_document(), headers=AUTH_HEADERS)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_filters_and_search(client: AsyncClient, admin_headers):
    await client.post("/api/legal-documents", json=_document(), headers=admin_headers)
    await client.post(
        "/api/legal-documents",
        json=_document(
            title="Employment Act: termination notice",
            content="An employer must give notice before terminating a contract.",
            category="employment",
        ),
        headers=admin_headers,
    )
    await client.post(
        "/api/legal-documents",
        json=_document(
            title="Land Registration guide",
            content="How to transfer land under 100% family ownership.",
            category="property",
        ),
        headers=admin_headers,
    )

    resp = await client.get("/api/legal-documents")
    titles = [d["title"] for d in resp.json()]
    # newest first
    assert titles[0] == "Land Registration guide"
    assert len(titles) == 3

    resp = await client.get("/api/legal-documents", params={"category": "employment"})
    assert [d["category"] for d in resp.json()] == ["employment"]

    # matches content
    resp = await client.get("/api/legal-documents", params={"search": "notice"})
    assert [d["title"] for d in resp.json()] == ["Employment Act: termination notice"]

    # matches title
    resp = await client.get("/api/legal-documents", params={"search": "Article 49"})
    assert len(resp.json()) == 1

    # LIKE wildcards match literally
    resp = await client.get("/api/legal-documents", params={"search": "100%"})
    assert [d["title"] for d in resp.json()] == ["Land Registration guide"]

    resp = await client.get(
        "/api/legal-documents", params={"search": "notice", "category": "property"}
    )
    assert resp.json() == []


@pytest.mark.asyncio
async def test_list_rejects_unknown_category(client: AsyncClient):
    resp = await client.get("/api/legal-documents", params={"category": "tax"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_and_update_legal_document(client: AsyncClient, lawyer_headers):
    resp = await client.post("/api/legal-documents", json=_document(), headers=lawyer_headers)
    doc = resp.json()

    resp = await client.get(f"/api/legal-documents/{doc['id']}")
    assert resp.status_code == 200
    assert resp.json()["title"] == doc["title"]

    resp = await client.patch(
        f"/api/legal-documents/{doc['id']}",
        json={"summary": "You must be told why you are arrested.", "difficulty_level": 2},
        headers=lawyer_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["summary"] == "You must be told why you are arrested."
    assert data["difficulty_level"] == 2
    assert data["content"] == doc["content"]

    resp = await client.get("/api/legal-documents/missing")
    assert resp.status_code == 404

    resp = await client.patch(
        "/api/legal-documents/missing", json={"summary": "x"}, headers=lawyer_headers
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_citizen_cannot_edit(client: AsyncClient, lawyer_headers):
    resp = await client.post("/api/legal-documents", json=_document(), headers=lawyer_headers)
    doc = resp.json()

    resp = await client.patch(
        f"/api/legal-documents/{doc['id']}", json={"summary": "x"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 403
