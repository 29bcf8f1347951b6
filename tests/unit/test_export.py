"""Tests for DocumentExporter."""

import zipfile

import httpx

from dealroom.application.use_cases.documents import DocumentExporter, DownloadBroker
from tests.fakes import InMemoryStorage, make_document


async def test_export_zip_skips_missing_and_dedupes(
    storage: InMemoryStorage, settings, notifier, tmp_path
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=request.url.path.encode())

    broker = DownloadBroker(
        storage,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        settings=settings,
        notifier=notifier,
    )
    first = make_document("a", category="legal", name="contract.pdf", object_key="deal123/legal/1-contract.pdf")
    second = make_document("b", category="legal", name="contract.pdf", object_key="deal123/legal/2-contract.pdf")
    missing = make_document("c", category="cim", name="cim.pdf", object_key="deal123/cim/3-cim.pdf")
    storage.objects[first.object_key] = b"1"
    storage.objects[second.object_key] = b"2"
    progress: list[tuple[int, int]] = []

    summary = await DocumentExporter(broker).export_zip(
        [first, second, missing],
        tmp_path / "out" / "deal123.zip",
        on_progress=lambda done, total: progress.append((done, total)),
    )

    assert (summary.total, summary.exported, summary.failed) == (3, 2, 1)
    assert "c" in summary.errors
    assert progress == [(1, 3), (2, 3), (3, 3)]
    with zipfile.ZipFile(summary.archive_path) as archive:
        assert sorted(archive.namelist()) == ["legal/b-contract.pdf", "legal/contract.pdf"]
