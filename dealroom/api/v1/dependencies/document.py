"""Document dependencies (composition root for the HTTP layer)."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.application.dtos.document import DocumentResult
from dealroom.application.interfaces.storage import IStorageService
from dealroom.application.notifications import CollectingNotifier
from dealroom.application.use_cases.documents import (
    AccessGate,
    DeletionCoordinator,
    DocumentAccessPolicy,
    DownloadBroker,
)
from dealroom.core.config import Settings, get_settings
from dealroom.domain.exceptions import ResourceNotFoundException
from dealroom.infrastructure.external.storage.factory import StorageFactory
from dealroom.infrastructure.messaging.redis_pubsub import get_change_publisher
from dealroom.infrastructure.persistence.database import get_db, get_session_factory
from dealroom.infrastructure.persistence.repositories import (
    DocumentRepository,
    TransactionalDocumentRepository,
)

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_storage(settings: SettingsDep) -> IStorageService:
    return StorageFactory.create_storage_service(settings)


def get_metadata_repository() -> TransactionalDocumentRepository:
    """Per-call transactional repository that publishes change events."""
    return TransactionalDocumentRepository(get_session_factory(), get_change_publisher())


def get_notifier() -> CollectingNotifier:
    return CollectingNotifier()


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Shared client from lifespan; None outside a running lifespan (broker opens its own)."""
    return getattr(request.app.state, "http_client", None)


def get_access_policy(
    settings: SettingsDep,
    x_nda_accepted: Annotated[bool, Header()] = False,
    x_user_role: Annotated[str | None, Header()] = None,
) -> DocumentAccessPolicy:
    return DocumentAccessPolicy.resolve(
        role=x_user_role,
        has_accepted_nda=x_nda_accepted,
        requires_nda=settings.nda_required,
    )


def get_access_gate(
    policy: Annotated[DocumentAccessPolicy, Depends(get_access_policy)],
) -> AccessGate:
    return policy.gate()


def get_uploader_id(x_user_id: Annotated[str | None, Header()] = None) -> str | None:
    return x_user_id


async def get_document_or_404(
    document_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DocumentResult:
    document = await DocumentRepository(db).get_by_id(document_id)
    if document is None:
        raise ResourceNotFoundException("document", document_id)
    return document


def get_download_broker(
    settings: SettingsDep,
    storage: Annotated[IStorageService, Depends(get_storage)],
    gate: Annotated[AccessGate, Depends(get_access_gate)],
    notifier: Annotated[CollectingNotifier, Depends(get_notifier)],
    http_client: Annotated[httpx.AsyncClient | None, Depends(get_http_client)],
) -> DownloadBroker:
    return DownloadBroker(
        storage,
        http_client=http_client,
        settings=settings,
        access_gate=gate,
        notifier=notifier,
    )


def get_deletion_coordinator(
    settings: SettingsDep,
    storage: Annotated[IStorageService, Depends(get_storage)],
    repository: Annotated[TransactionalDocumentRepository, Depends(get_metadata_repository)],
    notifier: Annotated[CollectingNotifier, Depends(get_notifier)],
) -> DeletionCoordinator:
    return DeletionCoordinator(repository, storage, settings=settings, notifier=notifier)
