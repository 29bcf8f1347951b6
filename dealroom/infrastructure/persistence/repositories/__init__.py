"""Repositories returning application DTOs."""

from dealroom.infrastructure.persistence.repositories.document_repo import (
    DocumentRepository,
    TransactionalDocumentRepository,
)

__all__ = ["DocumentRepository", "TransactionalDocumentRepository"]
