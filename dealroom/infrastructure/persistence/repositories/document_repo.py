"""Document repositories. Return application DTOs, never ORM objects.

DocumentRepository works inside a caller-owned session (API dependencies).
TransactionalDocumentRepository opens one transaction per call for the
long-lived document services and publishes change events after commit.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dealroom.application.dtos.change import DocumentChangeEvent
from dealroom.application.dtos.document import DocumentCreate, DocumentResult
from dealroom.application.interfaces.messaging import IChangePublisher
from dealroom.domain.exceptions import MetadataReadException, MetadataWriteException
from dealroom.infrastructure.persistence.models.document import Document
from dealroom.infrastructure.persistence.repositories.base import BaseRepository
from dealroom.shared.enums import ChangeType
from dealroom.shared.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _create_to_document(d: DocumentCreate) -> Document:
    """Map DocumentCreate (write-model) to the ORM row."""
    return Document(
        id=d.id,
        deal_id=d.deal_id,
        name=d.name,
        file_path=d.object_key,
        file_size=d.size,
        file_type=d.mime_type,
        tag=d.category,
        confidentiality_level=d.confidentiality_level,
        version=d.version,
        uploaded_by=d.uploaded_by,
    )


def _document_to_result(d: Document) -> DocumentResult:
    """Map the ORM row to DocumentResult."""
    return DocumentResult(
        id=d.id,
        deal_id=d.deal_id,
        name=d.name,
        object_key=d.file_path,
        category=d.tag,
        size=d.file_size,
        mime_type=d.file_type,
        created_at=ensure_utc(d.created_at) or utc_now(),
        uploaded_by=d.uploaded_by,
        confidentiality_level=d.confidentiality_level,
        version=d.version,
    )


class DocumentRepository(BaseRepository[Document]):
    """Document rows in one session. Change events collect in pending_changes."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Document)
        self.pending_changes: list[DocumentChangeEvent] = []

    async def list_by_deal(self, deal_id: str | None) -> list[DocumentResult]:
        """Documents of one deal (all deals for None), newest first."""
        stmt = select(Document).order_by(Document.created_at.desc(), Document.id.desc())
        if deal_id is not None:
            stmt = stmt.where(Document.deal_id == deal_id)
        result = await self.db.execute(stmt)
        return [_document_to_result(d) for d in result.scalars().all()]

    async def get_by_id(self, entity_id: str) -> DocumentResult | None:
        row = await super().get_by_id(entity_id)
        return _document_to_result(row) if row is not None else None

    async def count_by_deal_and_category(self, deal_id: str, category: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Document)
            .where(Document.deal_id == deal_id, Document.tag == category)
        )
        return int(result.scalar_one())

    async def create_document(self, data: DocumentCreate) -> DocumentResult:
        created = await self.create(_create_to_document(data))
        return _document_to_result(created)

    async def delete_document(self, document_id: str) -> DocumentResult | None:
        """Delete a row; None when there was no such row."""
        row = await super().get_by_id(document_id)
        if row is None:
            return None
        deleted = _document_to_result(row)
        await self.delete(row)
        return deleted

    async def _on_after_create(self, obj: Document) -> None:
        doc = _document_to_result(obj)
        self.pending_changes.append(
            DocumentChangeEvent(
                change_type=ChangeType.INSERT,
                document_id=doc.id,
                deal_id=doc.deal_id,
                record=doc.to_record(),
            )
        )

    async def _on_before_delete(self, obj: Document) -> None:
        self.pending_changes.append(
            DocumentChangeEvent(
                change_type=ChangeType.DELETE,
                document_id=obj.id,
                deal_id=obj.deal_id,
                record={"id": obj.id, "deal_id": obj.deal_id},
            )
        )


class TransactionalDocumentRepository:
    """IDocumentRepository with one transaction per call.

    Database errors surface as MetadataReadException / MetadataWriteException.
    Change events are published only after the transaction commits.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: IChangePublisher | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.publisher = publisher

    async def _read(self, op: Callable[[DocumentRepository], Awaitable[T]]) -> T:
        try:
            async with self.session_factory() as session:
                return await op(DocumentRepository(session))
        except SQLAlchemyError as e:
            logger.exception("Document metadata read failed")
            raise MetadataReadException(str(e)) from e

    async def _write(
        self, operation: str, op: Callable[[DocumentRepository], Awaitable[T]]
    ) -> T:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repo = DocumentRepository(session)
                    result = await op(repo)
        except SQLAlchemyError as e:
            logger.warning("Document metadata %s failed: %s", operation, e)
            raise MetadataWriteException(operation, str(e)) from e
        await self._publish(repo.pending_changes)
        return result

    async def _publish(self, events: list[DocumentChangeEvent]) -> None:
        if self.publisher is None:
            return
        for event in events:
            await self.publisher.publish(event)

    async def list_by_deal(self, deal_id: str | None) -> list[DocumentResult]:
        return await self._read(lambda repo: repo.list_by_deal(deal_id))

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        return await self._read(lambda repo: repo.get_by_id(document_id))

    async def create_document(self, data: DocumentCreate) -> DocumentResult:
        return await self._write("insert", lambda repo: repo.create_document(data))

    async def delete_document(self, document_id: str) -> DocumentResult | None:
        return await self._write("delete", lambda repo: repo.delete_document(document_id))
