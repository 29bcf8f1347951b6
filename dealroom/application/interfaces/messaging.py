"""Change feed ports: publishing and consuming document change events."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dealroom.application.dtos.change import DocumentChangeEvent


class IChangePublisher(Protocol):
    async def publish(self, event: DocumentChangeEvent) -> bool:
        """Publish one event. Returns False when the feed is unavailable."""


class IChangeFeed(Protocol):
    def subscribe(self, deal_id: str | None) -> AsyncIterator[DocumentChangeEvent]:
        """Yield change events for one deal, or every deal when deal_id is None."""
