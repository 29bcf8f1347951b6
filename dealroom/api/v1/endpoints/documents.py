"""Document routes by id: signed URLs, content download, deletion."""

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from dealroom.api.v1.dependencies import (
    get_deletion_coordinator,
    get_document_or_404,
    get_download_broker,
    get_notifier,
)
from dealroom.application.dtos.document import DocumentResult
from dealroom.application.notifications import CollectingNotifier
from dealroom.application.use_cases.documents import (
    DeletionCoordinator,
    DownloadBroker,
    MemoryTarget,
)
from dealroom.core.config import Settings, get_settings
from dealroom.core.limiter import limit_writes
from dealroom.schemas.document import (
    DeleteResponse,
    NotificationResponse,
    SignedUrlResponse,
)

router = APIRouter()

DocumentDep = Annotated[DocumentResult, Depends(get_document_or_404)]
BrokerDep = Annotated[DownloadBroker, Depends(get_download_broker)]


@router.get("/{document_id}/download-url", response_model=SignedUrlResponse)
async def get_download_url(
    document: DocumentDep,
    broker: BrokerDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SignedUrlResponse:
    """Short-lived signed URL; 404 when the object is missing from storage."""
    url = (await broker.download_url(document)).unwrap()
    return SignedUrlResponse(url=url, expires_in_seconds=settings.download_url_ttl_seconds)


@router.get("/{document_id}/preview-url", response_model=SignedUrlResponse)
async def get_preview_url(
    document: DocumentDep,
    broker: BrokerDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SignedUrlResponse:
    """Signed preview URL for images and PDFs."""
    url = (await broker.preview_url(document)).unwrap()
    return SignedUrlResponse(url=url, expires_in_seconds=settings.preview_url_ttl_seconds)


@router.get("/{document_id}/content")
async def download_content(document: DocumentDep, broker: BrokerDep) -> Response:
    """Existence-checked download of the document bytes."""
    target = MemoryTarget()
    downloaded = (await broker.download(document, target)).unwrap()
    return Response(
        content=target.files[downloaded.location],
        media_type=document.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.name)}"},
    )


@router.delete("/{document_id}", response_model=DeleteResponse)
@limit_writes
async def delete_document(
    request: Request,
    document: DocumentDep,
    coordinator: Annotated[DeletionCoordinator, Depends(get_deletion_coordinator)],
    notifier: Annotated[CollectingNotifier, Depends(get_notifier)],
) -> DeleteResponse:
    """Delete the metadata row, then the stored object (best effort)."""
    (await coordinator.delete(document)).unwrap()
    return DeleteResponse(
        id=document.id,
        notifications=[NotificationResponse(**n.to_dict()) for n in notifier.notifications],
    )
