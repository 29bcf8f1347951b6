"""Canonical in-memory document set for one scope (a deal, or all deals).

Every view (category cards, status panel, flat list) is a projection of one
DocumentStore, so optimistic removals and refetches show up everywhere at
once. Listeners are called synchronously after each change.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from dealroom.application.dtos.document import DocumentResult
from dealroom.application.interfaces.repositories import IDocumentRepository
from dealroom.domain.categories import documents_for
from dealroom.domain.exceptions import DealRoomException

logger = logging.getLogger(__name__)

StoreListener = Callable[["DocumentStore"], None]


class DocumentStore:
    """Document set of one deal (deal_id) or of every deal (deal_id=None)."""

    def __init__(self, repository: IDocumentRepository, deal_id: str | None = None) -> None:
        self.repository = repository
        self.deal_id = deal_id
        self._documents: list[DocumentResult] = []
        self._listeners: list[StoreListener] = []
        self._refresh_tasks: set[asyncio.Task[None]] = set()
        self.loaded = False

    @property
    def is_global(self) -> bool:
        return self.deal_id is None

    @property
    def documents(self) -> list[DocumentResult]:
        return list(self._documents)

    def in_scope(self, deal_id: str) -> bool:
        return self.deal_id is None or self.deal_id == deal_id

    def documents_for(self, category: str) -> list[DocumentResult]:
        return documents_for(self._documents, category)

    def count(self, category: str, deal_id: str | None = None) -> int:
        """Number of documents in a category (optionally narrowed to one deal)."""
        return sum(
            1
            for d in self._documents
            if d.category == category and (deal_id is None or d.deal_id == deal_id)
        )

    def get(self, document_id: str) -> DocumentResult | None:
        return next((d for d in self._documents if d.id == document_id), None)

    async def refresh(self) -> list[DocumentResult]:
        """Replace the set with the repository's current rows (newest first)."""
        documents = await self.repository.list_by_deal(self.deal_id)
        self._documents = list(documents)
        self.loaded = True
        self._emit()
        return self.documents

    def remove(self, document_id: str) -> bool:
        """Drop a document locally. Returns False when it was not present."""
        before = len(self._documents)
        self._documents = [d for d in self._documents if d.id != document_id]
        if len(self._documents) == before:
            return False
        self._emit()
        return True

    def upsert(self, document: DocumentResult) -> None:
        """Insert or replace a document (ignored if outside this scope)."""
        if not self.in_scope(document.deal_id):
            return
        others = [d for d in self._documents if d.id != document.id]
        self._documents = [document, *others]
        self._documents.sort(key=lambda d: d.created_at, reverse=True)
        self._emit()

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def schedule_refresh(self, delay: float) -> asyncio.Task[None]:
        """Refresh after delay seconds in the background. Failures are logged."""
        task = asyncio.create_task(self._delayed_refresh(delay))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def wait_for_pending_refreshes(self) -> None:
        if self._refresh_tasks:
            await asyncio.gather(*self._refresh_tasks, return_exceptions=True)

    async def close(self) -> None:
        """Cancel scheduled refreshes and drop listeners."""
        for task in list(self._refresh_tasks):
            task.cancel()
        await self.wait_for_pending_refreshes()
        self._listeners.clear()

    async def _delayed_refresh(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.refresh()
        except DealRoomException as e:
            logger.warning("Scheduled refresh failed for scope %s: %s", self.deal_id, e.message)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Document store listener failed")
