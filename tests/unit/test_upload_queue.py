"""Tests for UploadQueueManager: capacity, validation, and the two-phase write."""

import asyncio
import re
from typing import Any

import pytest

from dealroom.application.dtos.upload import LocalFile
from dealroom.application.notifications import CollectingNotifier
from dealroom.application.use_cases.documents import DocumentStore, UploadQueueManager
from dealroom.application.use_cases.documents.upload_queue import validate_file
from dealroom.core.config import Settings
from dealroom.domain.categories import Category, get_category
from dealroom.domain.exceptions import ValidationException
from dealroom.shared.enums import UploadStatus, UploadSurface
from tests.fakes import InMemoryDocumentRepository, InMemoryStorage


def pdf(name: str = "report.pdf", size: int = 10) -> LocalFile:
    return LocalFile(name=name, content=b"x" * size, mime_type="application/pdf")


@pytest.fixture
def make_manager(
    store: DocumentStore,
    storage: InMemoryStorage,
    repository: InMemoryDocumentRepository,
    settings: Settings,
    notifier: CollectingNotifier,
):
    def _make(category: Category | str = "financials", **kwargs: Any) -> UploadQueueManager:
        if isinstance(category, str):
            category = get_category(category)
        kwargs.setdefault("settings", settings)
        return UploadQueueManager(
            "deal123",
            category,
            store=store,
            storage=storage,
            repository=repository,
            notifier=notifier,
            **kwargs,
        )

    return _make


class GatedStorage(InMemoryStorage):
    """Upload waits for release() and tracks how many run at once."""

    def __init__(self) -> None:
        super().__init__()
        self.gate = asyncio.Event()
        self.active = 0
        self.max_active = 0

    def release(self) -> None:
        self.gate.set()

    async def upload(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await self.gate.wait()
            return await super().upload(*args, **kwargs)
        finally:
            self.active -= 1


class TestAddFiles:
    def test_capacity_truncates_and_reports_once(self, make_manager, notifier) -> None:
        """cim allows one file: the second is dropped with a capacity error."""
        manager = make_manager("cim")
        result = manager.add_files([pdf("a.pdf"), pdf("b.pdf")])

        assert len(result.accepted) == 1
        assert [f.name for f in result.dropped] == ["b.pdf"]
        assert result.capacity_error is not None
        assert result.capacity_error.error_code == "CAPACITY_EXCEEDED"
        assert len(manager.entries) == 1
        assert notifier.titles() == ["Upload limit reached"]

    async def test_sequential_calls_share_remaining_slots(
        self, make_manager, repository, store
    ) -> None:
        """With one slot left, only the first of two calls gets it."""
        repository.seed("l1", category="legal", name="one.pdf")
        repository.seed("l2", category="legal", name="two.pdf")
        await store.refresh()
        legal = Category(
            key="legal",
            label="Legal Documentation",
            description="Contracts",
            required=True,
            max_files=3,
        )
        manager = make_manager(legal)
        assert manager.remaining_slots == 1

        first = manager.add_files([pdf("three.pdf")])
        second = manager.add_files([pdf("four.pdf")])

        assert len(first.accepted) == 1
        assert first.capacity_error is None
        assert second.accepted == []
        assert second.capacity_error is not None
        assert manager.remaining_slots == 0
        assert [e.file.name for e in manager.entries] == ["three.pdf"]

    def test_empty_input_is_noop(self, make_manager, notifier) -> None:
        manager = make_manager()
        result = manager.add_files([])
        assert result.accepted == []
        assert result.capacity_error is None
        assert manager.entries == []
        assert notifier.notifications == []

    def test_invalid_files_rejected_individually(self, make_manager, notifier) -> None:
        manager = make_manager()
        result = manager.add_files(
            [
                pdf("good.pdf"),
                LocalFile(name="empty.pdf", content=b"", mime_type="application/pdf"),
                LocalFile(name="virus.exe", content=b"MZ", mime_type="application/x-msdownload"),
                pdf("huge.pdf", size=5000),
            ]
        )
        assert [e.file.name for e in result.accepted] == ["good.pdf", "empty.pdf"]
        assert sorted(r.file.name for r in result.rejected) == ["huge.pdf", "virus.exe"]
        assert all(r.error.error_code == "VALIDATION_ERROR" for r in result.rejected)
        assert notifier.titles() == ["Invalid files"]

    def test_size_ceiling_depends_on_surface(self, make_manager) -> None:
        panel = make_manager(surface=UploadSurface.DOCUMENTS_PANEL)
        assert panel.max_file_size == 1024
        assert panel.add_files([pdf(size=2000)]).rejected
        section = make_manager(surface=UploadSurface.CATEGORY_SECTION)
        assert section.add_files([pdf(size=2000)]).accepted


class TestQueueEditing:
    def test_remove_and_clear(self, make_manager) -> None:
        manager = make_manager()
        added = manager.add_files([pdf("a.pdf"), pdf("b.pdf")])
        assert manager.remove_file(added.accepted[0].id)
        assert not manager.remove_file("missing")
        assert [e.file.name for e in manager.entries] == ["b.pdf"]
        manager.clear_files()
        assert manager.entries == []

    async def test_cannot_remove_while_uploading(
        self, store, repository, settings, notifier
    ) -> None:
        storage = GatedStorage()
        manager = UploadQueueManager(
            "deal123",
            get_category("financials"),
            store=store,
            storage=storage,
            repository=repository,
            settings=settings,
            notifier=notifier,
        )
        entry = manager.add_files([pdf()]).accepted[0]
        task = asyncio.create_task(manager.upload())
        await asyncio.sleep(0)

        assert manager.is_uploading
        assert entry.status is UploadStatus.UPLOADING
        assert not manager.remove_file(entry.id)

        storage.release()
        summary = await task
        assert summary.success == 1
        assert not manager.is_uploading
        assert [e.id for e in manager.entries] == [entry.id]
        assert len(repository.rows) == 1

    async def test_removed_entry_is_never_uploaded(
        self, make_manager, storage, repository
    ) -> None:
        manager = make_manager()
        entry = manager.add_files([pdf()]).accepted[0]
        assert manager.remove_file(entry.id)

        summary = await manager.upload()

        assert summary.total == 0
        assert storage.calls_of("upload") == []
        assert repository.rows == {}


class TestUpload:
    async def test_success_updates_entry_store_and_schedules_refresh(
        self, make_manager, store, storage, repository, notifier
    ) -> None:
        manager = make_manager(uploaded_by="user-1")
        entry = manager.add_files([pdf("report.pdf")]).accepted[0]

        summary = await manager.upload()

        assert (summary.success, summary.failed) == (1, 0)
        assert entry.status is UploadStatus.SUCCESS
        assert entry.progress == 100
        assert entry.object_key in storage.objects
        row = repository.rows[entry.document_id]
        assert row.object_key == entry.object_key
        assert row.uploaded_by == "user-1"
        assert store.get(entry.document_id) is not None
        assert notifier.titles() == ["Upload Complete"]

        await store.wait_for_pending_refreshes()
        assert repository.list_calls == 1

    async def test_object_key_format(self, make_manager) -> None:
        manager = make_manager()
        entry = manager.add_files([pdf("Q3 report.pdf")]).accepted[0]
        await manager.upload()
        assert re.fullmatch(r"deal123/financials/\d{13}-Q3 report\.pdf", entry.object_key)

    async def test_successful_entries_do_not_count_twice(self, make_manager, store) -> None:
        manager = make_manager("cim")
        manager.add_files([pdf()])
        await manager.upload()
        assert store.count("cim") == 1
        assert manager.remaining_slots == 0

    async def test_storage_failure_keeps_other_uploads(
        self, make_manager, storage, repository, notifier
    ) -> None:
        storage.fail_upload_names = {"bad.pdf"}
        manager = make_manager()
        manager.add_files([pdf("good.pdf"), pdf("bad.pdf")])

        summary = await manager.upload()

        assert (summary.success, summary.failed) == (1, 1)
        bad = next(e for e in manager.entries if e.file.name == "bad.pdf")
        assert bad.status is UploadStatus.ERROR
        assert bad.error.error_code == "STORAGE_UPLOAD_ERROR"
        assert len(repository.rows) == 1
        assert notifier.notifications[-1].message == "1 document(s) uploaded successfully, 1 failed."

    async def test_all_failed_notifies_failure(self, make_manager, storage, notifier, store) -> None:
        storage.fail_upload_names = {".pdf"}
        manager = make_manager()
        manager.add_files([pdf("a.pdf"), pdf("b.pdf")])
        summary = await manager.upload()
        assert (summary.success, summary.failed) == (0, 2)
        assert notifier.titles() == ["Upload Failed"]
        assert notifier.notifications[0].variant.value == "destructive"

    async def test_metadata_failure_removes_orphan(
        self, make_manager, storage, repository
    ) -> None:
        repository.fail_create = True
        manager = make_manager()
        entry = manager.add_files([pdf()]).accepted[0]

        await manager.upload()

        assert entry.status is UploadStatus.ERROR
        assert entry.error.error_code == "METADATA_WRITE_ERROR"
        assert storage.calls_of("delete") == [entry.object_key]
        assert entry.object_key not in storage.objects

    async def test_metadata_failure_without_compensation_leaves_orphan(
        self, make_manager, storage, repository, settings
    ) -> None:
        """Object write succeeds, insert fails: the key stays listed with no row."""
        repository.fail_create = True
        manager = make_manager(
            settings=settings.model_copy(update={"compensate_orphaned_objects": False})
        )
        entry = manager.add_files([pdf()]).accepted[0]

        await manager.upload()

        assert entry.status is UploadStatus.ERROR
        folder, name = entry.object_key.rsplit("/", 1)
        assert name in await storage.list_folder(folder)
        assert not any(r.object_key == entry.object_key for r in repository.rows.values())

    async def test_retry_failed(self, make_manager, storage) -> None:
        storage.fail_upload_names = {"report.pdf"}
        manager = make_manager()
        entry = manager.add_files([pdf()]).accepted[0]
        await manager.upload()
        assert entry.status is UploadStatus.ERROR

        storage.fail_upload_names = set()
        summary = await manager.retry_failed()

        assert summary.success == 1
        assert entry.status is UploadStatus.SUCCESS
        assert entry.error is None

    async def test_upload_without_pending_entries(self, make_manager, notifier) -> None:
        summary = await make_manager().upload()
        assert summary.total == 0
        assert notifier.notifications == []

    async def test_concurrency_is_bounded(self, store, repository, settings, notifier) -> None:
        storage = GatedStorage()
        manager = UploadQueueManager(
            "deal123",
            get_category("financials"),
            store=store,
            storage=storage,
            repository=repository,
            settings=settings.model_copy(update={"upload_concurrency": 2}),
            notifier=notifier,
        )
        manager.add_files([pdf(f"f{i}.pdf") for i in range(5)])
        task = asyncio.create_task(manager.upload())
        for _ in range(5):
            await asyncio.sleep(0)
        assert storage.max_active == 2
        storage.release()
        summary = await task
        assert summary.success == 5
        assert storage.max_active == 2


def test_validate_file_accepts_by_mime_type() -> None:
    validate_file(
        LocalFile(name="scan", content=b"x", mime_type="image/png"),
        get_category("other"),
        max_size=10,
    )


def test_validate_file_too_large_message() -> None:
    with pytest.raises(ValidationException, match="exceeds the maximum size of 1 MB"):
        validate_file(pdf(size=2 * 1024 * 1024), get_category("other"), max_size=1024 * 1024)


class TestOverlappingUploads:
    async def test_double_submit_uploads_each_entry_once(
        self, make_manager, storage, repository, store
    ) -> None:
        """Two overlapping upload() calls on cim still leave one document."""
        manager = make_manager("cim")
        entry = manager.add_files([pdf()]).accepted[0]

        first, second = await asyncio.gather(manager.upload(), manager.upload())

        assert (first.success, second.total) == (1, 0)
        assert entry.status is UploadStatus.SUCCESS
        assert len(storage.calls_of("upload")) == 1
        assert len(repository.rows) == 1
        assert store.count("cim") == 1


class TestObjectKeyAllocation:
    @pytest.fixture(autouse=True)
    def frozen_clock(self, monkeypatch) -> int:
        monkeypatch.setattr(
            "dealroom.application.use_cases.documents.upload_queue.utc_now_ms",
            lambda: 1_700_000_000_000,
        )
        return 1_700_000_000_000

    async def test_same_name_same_millisecond_gets_distinct_keys(
        self, make_manager, storage, repository
    ) -> None:
        manager = make_manager()
        added = manager.add_files([pdf("deck.pdf"), pdf("deck.pdf")])

        summary = await manager.upload()

        assert summary.success == 2
        keys = sorted(e.object_key for e in added.accepted)
        assert keys == [
            "deal123/financials/1700000000000-deck.pdf",
            "deal123/financials/1700000000001-deck.pdf",
        ]
        assert sorted(r.object_key for r in repository.rows.values()) == keys

    async def test_failed_insert_never_deletes_an_existing_object(
        self, make_manager, storage, repository
    ) -> None:
        """The key held by another document is skipped, so compensation cannot reach it."""
        taken = "deal123/financials/1700000000000-deck.pdf"
        storage.objects[taken] = b"first upload"
        repository.fail_create = True
        manager = make_manager()
        entry = manager.add_files([pdf("deck.pdf")]).accepted[0]

        await manager.upload()

        assert entry.status is UploadStatus.ERROR
        assert entry.object_key == "deal123/financials/1700000000001-deck.pdf"
        assert storage.calls_of("delete") == [entry.object_key]
        assert storage.objects[taken] == b"first upload"
