"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill.
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dealroom.application.dtos.document import DocumentCreate, DocumentResult


class IDocumentRepository(Protocol):
    """Metadata store for document rows. Each call is its own transaction."""

    async def list_by_deal(self, deal_id: str | None) -> list[DocumentResult]:
        """Return documents of one deal (or all deals for None), newest first."""

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        """Return one document or None."""

    async def create_document(self, data: DocumentCreate) -> DocumentResult:
        """Insert a row. Raises MetadataWriteException on failure."""

    async def delete_document(self, document_id: str) -> DocumentResult | None:
        """Delete a row; return the deleted document, or None if it was already gone.

        Raises MetadataWriteException on failure.
        """
