"""HTTP tests for the deal document routes (SQLite metadata, local storage)."""

from httpx import AsyncClient

from dealroom.core.config import get_settings
from dealroom.infrastructure.external.storage.local_storage import LocalStorageService

PDF = ("report.pdf", b"%PDF-1.7 test", "application/pdf")


async def upload(client: AsyncClient, category: str = "financials", *files, deal_id: str = "deal123"):
    return await client.post(
        f"/api/v1/deals/{deal_id}/documents/{category}",
        files=[("files", f) for f in (files or (PDF,))],
        headers={"X-User-ID": "user-1"},
    )


async def test_upload_then_views(client: AsyncClient) -> None:
    response = await upload(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] == 1
    entry = body["entries"][0]
    assert entry["status"] == "success"
    assert entry["object_key"].startswith("deal123/financials/")
    assert [n["title"] for n in body["notifications"]] == ["Upload Complete"]

    rows = (await client.get("/api/v1/deals/deal123/documents")).json()
    assert [r["id"] for r in rows] == [entry["document_id"]]
    assert rows[0]["category_label"] == "Financial Statements"
    assert rows[0]["uploaded_by"] == "user-1"

    status = (await client.get("/api/v1/deals/deal123/documents/status")).json()
    assert status["counts"]["financials"] == 1
    assert status["percentage"] == 25

    cards = (await client.get("/api/v1/deals/deal123/documents/categories")).json()
    financials = next(c for c in cards if c["key"] == "financials")
    assert financials["count"] == 1
    assert financials["status"] == "complete"


async def test_download_url_and_token_route(client: AsyncClient) -> None:
    document_id = (await upload(client)).json()["entries"][0]["document_id"]

    response = await client.get(f"/api/v1/documents/{document_id}/download-url")
    assert response.status_code == 200
    body = response.json()
    assert body["expires_in_seconds"] == 300
    assert body["url"].startswith("http://test/api/v1/storage/download/")

    content = await client.get(body["url"].removeprefix("http://test"))
    assert content.status_code == 200
    assert content.content == b"%PDF-1.7 test"


async def test_missing_object_is_404(client: AsyncClient) -> None:
    body = (await upload(client)).json()["entries"][0]
    storage = LocalStorageService(get_settings().storage_root)
    assert await storage.delete(body["object_key"])

    response = await client.get(f"/api/v1/documents/{body['document_id']}/download-url")
    assert response.status_code == 404
    assert response.json()["error"] == "DOCUMENT_NOT_FOUND"


async def test_preview_url_rejects_spreadsheets(client: AsyncClient) -> None:
    xlsx = ("model.xlsx", b"PK", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    document_id = (await upload(client, "financials", xlsx)).json()["entries"][0]["document_id"]
    response = await client.get(f"/api/v1/documents/{document_id}/preview-url")
    assert response.status_code == 400


async def test_delete_document(client: AsyncClient) -> None:
    body = (await upload(client)).json()["entries"][0]

    response = await client.delete(f"/api/v1/documents/{body['document_id']}")
    assert response.status_code == 200
    assert response.json()["notifications"][0]["title"] == "Success"

    assert (await client.get("/api/v1/deals/deal123/documents")).json() == []
    missing = await client.get(f"/api/v1/documents/{body['document_id']}/download-url")
    assert missing.status_code == 404
    assert missing.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_capacity_exceeded(client: AsyncClient) -> None:
    assert (await upload(client, "cim")).status_code == 201
    response = await upload(client, "cim", ("second.pdf", b"%PDF", "application/pdf"))
    assert response.status_code == 409
    assert response.json()["error"] == "CAPACITY_EXCEEDED"


async def test_partial_capacity_reports_dropped(client: AsyncClient) -> None:
    response = await upload(
        client,
        "cim",
        ("a.pdf", b"%PDF-a", "application/pdf"),
        ("b.pdf", b"%PDF-b", "application/pdf"),
        deal_id="deal-partial",
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] == 1
    assert body["dropped"] == ["b.pdf"]
    assert body["capacity_error"].startswith("Maximum 1 files allowed")


async def test_invalid_file_type(client: AsyncClient) -> None:
    response = await upload(client, "legal", ("setup.exe", b"MZ", "application/x-msdownload"))
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_unknown_category(client: AsyncClient) -> None:
    response = await upload(client, "tax_returns")
    assert response.status_code == 400
    listing = await client.get("/api/v1/deals/deal123/documents", params={"category": "tax"})
    assert listing.status_code == 400


async def test_unknown_document_is_404(client: AsyncClient) -> None:
    response = await client.delete("/api/v1/documents/does-not-exist")
    assert response.status_code == 404
