"""In-memory stand-ins for the storage, metadata, and change feed ports."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from typing import Any, BinaryIO

from dealroom.application.dtos.change import DocumentChangeEvent
from dealroom.application.dtos.document import DocumentCreate, DocumentResult
from dealroom.domain.exceptions import MetadataReadException, MetadataWriteException
from dealroom.infrastructure.exceptions import (
    StorageDeleteError,
    StorageListError,
    StorageNotFoundError,
    StorageUploadError,
)

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


def make_document(
    document_id: str = "doc1",
    *,
    deal_id: str = "deal123",
    category: str = "financials",
    name: str = "report.pdf",
    object_key: str | None = None,
    size: int | None = 100,
    mime_type: str | None = "application/pdf",
    created_at: datetime | None = None,
    confidentiality_level: str | None = None,
) -> DocumentResult:
    return DocumentResult(
        id=document_id,
        deal_id=deal_id,
        name=name,
        object_key=object_key or f"{deal_id}/{category}/1690000000-{name}",
        category=category,
        size=size,
        mime_type=mime_type,
        created_at=created_at or _EPOCH,
        confidentiality_level=confidentiality_level,
    )


class InMemoryStorage:
    """Object store in a dict. Records every call as (operation, key)."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_upload_names: set[str] = set()
        self.fail_delete = False
        self.fail_list = False

    def calls_of(self, operation: str) -> list[str]:
        return [key for op, key in self.calls if op == operation]

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self.calls.append(("upload", storage_ref))
        if any(storage_ref.endswith(name) for name in self.fail_upload_names):
            raise StorageUploadError(storage_ref, "simulated failure")
        content = file_data.read()
        self.objects[storage_ref] = content
        return {"storage_ref": storage_ref, "checksum": expected_checksum, "size": len(content)}

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        if storage_ref not in self.objects:
            raise StorageNotFoundError(storage_ref)
        yield self.objects[storage_ref]

    async def delete(self, storage_ref: str) -> bool:
        self.calls.append(("delete", storage_ref))
        if self.fail_delete:
            raise StorageDeleteError(storage_ref, "simulated failure")
        return self.objects.pop(storage_ref, None) is not None

    async def exists(self, storage_ref: str) -> bool:
        return storage_ref in self.objects

    async def list_folder(
        self, folder: str, search: str | None = None, limit: int = 100
    ) -> list[str]:
        self.calls.append(("list", folder))
        if self.fail_list:
            raise StorageListError(folder, "simulated failure")
        prefix = f"{folder.rstrip('/')}/"
        names = sorted(
            key[len(prefix) :]
            for key in self.objects
            if key.startswith(prefix)
            and "/" not in key[len(prefix) :]
            and key[len(prefix) :].startswith(search or "")
        )
        return names[:limit]

    async def generate_download_url(
        self, storage_ref: str, expiration: timedelta = timedelta(minutes=5)
    ) -> str:
        self.calls.append(("sign", storage_ref))
        return f"https://storage.test/{storage_ref}?expires={int(expiration.total_seconds())}"


class InMemoryDocumentRepository:
    """Metadata rows in a dict. Each insert is one microsecond newer than the last."""

    def __init__(self) -> None:
        self.rows: dict[str, DocumentResult] = {}
        self.list_calls = 0
        self.fail_create = False
        self.fail_delete = False
        self.fail_list = False
        self._tick = 0

    def _next_created_at(self) -> datetime:
        self._tick += 1
        return _EPOCH + timedelta(microseconds=self._tick)

    def seed(self, document_id: str, **fields: Any) -> DocumentResult:
        """Insert a row directly (as another client would)."""
        fields.setdefault("created_at", self._next_created_at())
        document = make_document(document_id, **fields)
        self.rows[document.id] = document
        return document

    async def list_by_deal(self, deal_id: str | None) -> list[DocumentResult]:
        self.list_calls += 1
        if self.fail_list:
            raise MetadataReadException("simulated failure")
        rows = [d for d in self.rows.values() if deal_id is None or d.deal_id == deal_id]
        return sorted(rows, key=lambda d: d.created_at, reverse=True)

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        return self.rows.get(document_id)

    async def create_document(self, data: DocumentCreate) -> DocumentResult:
        if self.fail_create:
            raise MetadataWriteException("insert", "simulated failure")
        document = DocumentResult(
            id=data.id,
            deal_id=data.deal_id,
            name=data.name,
            object_key=data.object_key,
            category=data.category,
            size=data.size,
            mime_type=data.mime_type,
            created_at=self._next_created_at(),
            uploaded_by=data.uploaded_by,
            confidentiality_level=data.confidentiality_level,
            version=data.version,
        )
        self.rows[document.id] = document
        return document

    async def delete_document(self, document_id: str) -> DocumentResult | None:
        if self.fail_delete:
            raise MetadataWriteException("delete", "simulated failure")
        return self.rows.pop(document_id, None)


class QueueChangeFeed:
    """Change feed fed by put(); remembers subscriptions and closes."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[DocumentChangeEvent] = asyncio.Queue()
        self.subscribed: list[str | None] = []
        self.closed = 0

    async def put(self, event: DocumentChangeEvent) -> None:
        await self.queue.put(event)

    async def subscribe(self, deal_id: str | None) -> AsyncIterator[DocumentChangeEvent]:
        self.subscribed.append(deal_id)
        try:
            while True:
                yield await self.queue.get()
        finally:
            self.closed += 1


class RecordingPublisher:
    def __init__(self) -> None:
        self.events: list[DocumentChangeEvent] = []

    async def publish(self, event: DocumentChangeEvent) -> bool:
        self.events.append(event)
        return True
