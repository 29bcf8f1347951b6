"""Upload queue for one (deal, category): capacity, validation, two-phase write.

Each upload writes the object first, then inserts the metadata row. When the
insert fails, the object just written is removed again (best effort) unless
compensation is switched off in settings.
"""

from __future__ import annotations

import asyncio
import hashlib
import io
import logging
from collections.abc import Sequence

from dealroom.application.dtos.document import DocumentCreate
from dealroom.application.dtos.upload import (
    AddFilesResult,
    LocalFile,
    RejectedFile,
    UploadQueueEntry,
    UploadSummary,
)
from dealroom.application.interfaces.repositories import IDocumentRepository
from dealroom.application.interfaces.storage import IStorageService
from dealroom.application.notifications import (
    LoggingNotifier,
    Notifier,
    failure,
    success,
)
from dealroom.application.use_cases.documents.document_store import DocumentStore
from dealroom.core.config import Settings, get_settings
from dealroom.domain.categories import Category
from dealroom.domain.exceptions import (
    CapacityExceededException,
    DealRoomException,
    MetadataWriteException,
    ValidationException,
)
from dealroom.infrastructure.exceptions import StorageUploadError
from dealroom.shared.enums import UploadStatus, UploadSurface
from dealroom.shared.telemetry.tracing import traced
from dealroom.shared.utils.datetime import utc_now_ms
from dealroom.shared.utils.files import build_object_key
from dealroom.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def validate_file(file: LocalFile, category: Category, max_size: int) -> None:
    """Check a picked file against the category's types and the surface's ceiling.

    Raises:
        ValidationException: Too large, or not an accepted type.
    """
    if file.size > max_size:
        raise ValidationException(
            f"{file.name} exceeds the maximum size of {max_size // (1024 * 1024)} MB",
            field="file",
            name=file.name,
            max_size=max_size,
        )
    if not category.accepts(file.name, file.mime_type):
        raise ValidationException(
            f"{file.name} is not an accepted file type",
            field="file",
            name=file.name,
        )


def compute_checksum(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class UploadQueueManager:
    """Queue of picked files for one category of one deal.

    add_files never awaits, so concurrent callers are serialized by the
    event loop and each one sees the entries the previous one added.
    """

    def __init__(
        self,
        deal_id: str,
        category: Category,
        *,
        store: DocumentStore,
        storage: IStorageService,
        repository: IDocumentRepository,
        surface: UploadSurface = UploadSurface.CATEGORY_SECTION,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        uploaded_by: str | None = None,
    ) -> None:
        self.deal_id = deal_id
        self.category = category
        self.store = store
        self.storage = storage
        self.repository = repository
        self.surface = surface
        self.settings = settings or get_settings()
        self.notifier = notifier or LoggingNotifier()
        self.uploaded_by = uploaded_by
        self._entries: list[UploadQueueEntry] = []
        self._in_flight = 0
        self._claimed_keys: set[str] = set()
        self._semaphore = asyncio.Semaphore(self.settings.upload_concurrency)

    @property
    def entries(self) -> list[UploadQueueEntry]:
        return list(self._entries)

    @property
    def is_uploading(self) -> bool:
        return self._in_flight > 0

    @property
    def max_file_size(self) -> int:
        return self.settings.max_upload_size_for(self.surface)

    @property
    def existing_count(self) -> int:
        return self.store.count(self.category.key, deal_id=self.deal_id)

    @property
    def remaining_slots(self) -> int:
        # Successful entries are already in the store; only count the rest.
        queued = sum(1 for e in self._entries if e.status is not UploadStatus.SUCCESS)
        return self.category.max_files - self.existing_count - queued

    def add_files(self, files: Sequence[LocalFile]) -> AddFilesResult:
        """Queue as many files as the category has room for.

        Files beyond the remaining capacity are dropped and reported by a
        single CapacityExceededException. Files that fail validation are
        reported individually and never queued.
        """
        if not files:
            return AddFilesResult()

        remaining = self.remaining_slots
        if remaining <= 0:
            error = CapacityExceededException(
                self.category.label, self.category.max_files, dropped=len(files)
            )
            self._notify_capacity(error)
            return AddFilesResult(dropped=list(files), capacity_error=error)

        taken = list(files[:remaining])
        dropped = list(files[remaining:])
        capacity_error = None
        if dropped:
            capacity_error = CapacityExceededException(
                self.category.label, self.category.max_files, dropped=len(dropped)
            )
            self._notify_capacity(capacity_error)

        accepted: list[UploadQueueEntry] = []
        rejected: list[RejectedFile] = []
        for file in taken:
            try:
                validate_file(file, self.category, self.max_file_size)
            except ValidationException as e:
                rejected.append(RejectedFile(file=file, error=e))
                continue
            entry = UploadQueueEntry(id=generate_cuid(), file=file)
            self._entries.append(entry)
            accepted.append(entry)

        if rejected:
            self.notifier.notify(
                failure(
                    "Invalid files",
                    "; ".join(r.error.message for r in rejected),
                )
            )
        return AddFilesResult(
            accepted=accepted,
            rejected=rejected,
            dropped=dropped,
            capacity_error=capacity_error,
        )

    def remove_file(self, entry_id: str) -> bool:
        """Remove a queued entry. Entries that are uploading cannot be removed."""
        for entry in self._entries:
            if entry.id == entry_id:
                if entry.status is UploadStatus.UPLOADING:
                    return False
                self._entries.remove(entry)
                return True
        return False

    def clear_files(self) -> None:
        """Empty the queue. Uploads already in flight still run to completion."""
        self._entries = []

    async def retry_failed(self) -> UploadSummary:
        """Reset failed entries to pending and upload them again."""
        for entry in self._entries:
            if entry.status is UploadStatus.ERROR:
                entry.status = UploadStatus.PENDING
                entry.progress = 0
                entry.error = None
                entry.object_key = None
        return await self.upload()

    @traced("upload_queue.upload")
    async def upload(self) -> UploadSummary:
        """Upload every pending entry. Per-entry failures never stop the others."""
        pending = [e for e in self._entries if e.status is UploadStatus.PENDING]
        if not pending:
            return UploadSummary()

        # Claimed before the first await so remove_file and a second upload() skip them.
        for entry in pending:
            entry.status = UploadStatus.UPLOADING
        self._in_flight += len(pending)
        outcomes = await asyncio.gather(*(self._upload_limited(e) for e in pending))
        summary = UploadSummary(
            success=sum(1 for ok in outcomes if ok),
            failed=sum(1 for ok in outcomes if not ok),
        )

        if summary.success:
            message = f"{summary.success} document(s) uploaded successfully"
            if summary.failed:
                message += f", {summary.failed} failed"
            self.notifier.notify(success("Upload Complete", message + "."))
            self.store.schedule_refresh(self.settings.refetch_delay_seconds)
        else:
            self.notifier.notify(
                failure("Upload Failed", f"All {summary.failed} upload(s) failed")
            )
        logger.info(
            "Uploads for deal %s category %s: %d succeeded, %d failed",
            self.deal_id,
            self.category.key,
            summary.success,
            summary.failed,
        )
        return summary

    async def _upload_limited(self, entry: UploadQueueEntry) -> bool:
        try:
            async with self._semaphore:
                return await self._upload_entry(entry)
        finally:
            self._in_flight -= 1

    async def _upload_entry(self, entry: UploadQueueEntry) -> bool:
        file = entry.file
        entry.progress = 10
        object_key = await self._allocate_object_key(file.name)
        entry.object_key = object_key
        entry.progress = 30

        try:
            await self.storage.upload(
                file_data=io.BytesIO(file.content),
                storage_ref=object_key,
                expected_checksum=compute_checksum(file.content),
                content_type=file.content_type,
                metadata={"deal_id": self.deal_id, "category": self.category.key},
            )
        except DealRoomException as e:
            error = (
                e if isinstance(e, StorageUploadError) else StorageUploadError(object_key, e.message)
            )
            return self._fail(entry, error)
        entry.progress = 70

        try:
            document = await self.repository.create_document(
                DocumentCreate(
                    id=generate_cuid(),
                    deal_id=self.deal_id,
                    name=file.name,
                    object_key=object_key,
                    category=self.category.key,
                    size=file.size,
                    mime_type=file.content_type,
                    uploaded_by=self.uploaded_by,
                )
            )
        except MetadataWriteException as e:
            await self._compensate(object_key)
            return self._fail(entry, e)

        entry.document_id = document.id
        entry.status = UploadStatus.SUCCESS
        entry.progress = 100
        self.store.upsert(document)
        return True

    async def _allocate_object_key(self, name: str) -> str:
        """Return a key no other upload of this queue holds and storage does not have.

        Keys only differ by their millisecond timestamp, so a taken key moves
        the timestamp forward by one.
        """
        timestamp = utc_now_ms()
        while True:
            object_key = build_object_key(self.deal_id, self.category.key, name, timestamp)
            if object_key not in self._claimed_keys:
                self._claimed_keys.add(object_key)
                if not await self.storage.exists(object_key):
                    return object_key
            timestamp += 1

    async def _compensate(self, object_key: str) -> None:
        if not self.settings.compensate_orphaned_objects:
            logger.warning("Metadata insert failed; object %s left in storage", object_key)
            return
        try:
            await self.storage.delete(object_key)
            logger.info("Removed orphaned object %s after failed metadata insert", object_key)
        except DealRoomException as e:
            logger.warning("Could not remove orphaned object %s: %s", object_key, e.message)

    def _fail(self, entry: UploadQueueEntry, error: DealRoomException) -> bool:
        entry.status = UploadStatus.ERROR
        entry.error = error
        logger.warning("Upload of %s failed: %s", entry.file.name, error.message)
        return False

    def _notify_capacity(self, error: CapacityExceededException) -> None:
        self.notifier.notify(failure("Upload limit reached", error.message))
