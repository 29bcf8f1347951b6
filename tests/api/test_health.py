"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_readiness_checks_database(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["database"] is True
    assert data["change_feed"] is False


async def test_categories(client: AsyncClient) -> None:
    response = await client.get("/api/v1/document-categories")
    assert response.status_code == 200
    data = response.json()
    assert [c["key"] for c in data][0] == "cim"
    assert len(data) == 7
    assert ".pdf" in data[0]["accepted_extensions"]
