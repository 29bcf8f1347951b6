"""Deletion: metadata row first, then optimistic local removal, then the object.

Once the row is gone the document is gone. A failed object delete only
leaves an orphan behind and is logged, never reported as a failure.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dealroom.application.dtos.document import DocumentResult
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
from dealroom.domain.exceptions import DealRoomException
from dealroom.domain.result import Result
from dealroom.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)


class DeletionCoordinator:
    def __init__(
        self,
        repository: IDocumentRepository,
        storage: IStorageService,
        *,
        stores: Iterable[DocumentStore] = (),
        settings: Settings | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.stores = list(stores)
        self.settings = settings or get_settings()
        self.notifier = notifier or LoggingNotifier()

    @traced("deletion.delete")
    async def delete(self, document: DocumentResult) -> Result[DocumentResult]:
        """Delete a document.

        Fails only when the metadata delete fails; the object store is not
        touched in that case.
        """
        try:
            await self.repository.delete_document(document.id)
        except DealRoomException as e:
            logger.warning("Metadata delete of %s failed: %s", document.id, e.message)
            self.notifier.notify(failure("Delete Failed", f"Could not delete {document.name}"))
            return Result.failure(e)

        for store in self.stores:
            store.remove(document.id)
        self.notifier.notify(success("Success", f"{document.name} deleted successfully"))

        await self._remove_object(document)

        for store in self.stores:
            store.schedule_refresh(self.settings.refetch_delay_seconds)
        return Result.success(document)

    async def _remove_object(self, document: DocumentResult) -> None:
        try:
            removed = await self.storage.delete(document.object_key)
        except DealRoomException as e:
            logger.warning(
                "Storage delete of %s failed; object left behind: %s",
                document.object_key,
                e.message,
            )
            return
        if not removed:
            logger.warning("Storage object %s was already missing", document.object_key)
