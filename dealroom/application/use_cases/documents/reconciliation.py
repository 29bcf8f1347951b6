"""Reconciliation stream: applies pushed change events to a DocumentStore.

Deletes are applied locally without a refetch; inserts and updates refetch
the store's scope. The stream owns one consumer task; stop() (or leaving the
async context) cancels it, so a torn-down view leaves no listener behind.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

from dealroom.application.dtos.change import DocumentChangeEvent
from dealroom.application.interfaces.messaging import IChangeFeed
from dealroom.application.use_cases.documents.document_store import DocumentStore
from dealroom.domain.exceptions import DealRoomException
from dealroom.shared.enums import ChangeType

logger = logging.getLogger(__name__)


class ReconciliationStream:
    def __init__(self, store: DocumentStore, feed: IChangeFeed) -> None:
        self.store = store
        self.feed = feed
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def apply(self, event: DocumentChangeEvent) -> None:
        """Apply one change event to the store."""
        if not self.store.in_scope(event.deal_id):
            return
        if event.change_type is ChangeType.DELETE:
            self.store.remove(event.document_id)
            return
        try:
            await self.store.refresh()
        except DealRoomException as e:
            logger.warning("Refetch after %s event failed: %s", event.change_type.value, e.message)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        """Cancel the consumer task and wait for the subscription to close."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> ReconciliationStream:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    async def _consume(self) -> None:
        subscription = self.feed.subscribe(self.store.deal_id)
        try:
            async for event in subscription:
                await self.apply(event)
        except Exception:
            logger.exception(
                "Change feed for deal %s failed; reconciliation stopped", self.store.deal_id
            )
        finally:
            aclose = getattr(subscription, "aclose", None)
            if aclose is not None:
                await aclose()
