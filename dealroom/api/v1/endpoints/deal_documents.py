"""Deal-scoped document routes: the three views and multipart upload."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile

from dealroom.api.v1.dependencies import (
    get_access_gate,
    get_metadata_repository,
    get_notifier,
    get_storage,
    get_uploader_id,
)
from dealroom.application.dtos.upload import LocalFile
from dealroom.application.interfaces.storage import IStorageService
from dealroom.application.notifications import CollectingNotifier
from dealroom.application.use_cases.documents import (
    AccessGate,
    CategoryView,
    DocumentStore,
    FlatListView,
    StatusPanel,
    UploadQueueManager,
)
from dealroom.core.config import Settings, get_settings
from dealroom.core.limiter import limit_upload
from dealroom.domain.categories import get_category
from dealroom.infrastructure.persistence.repositories import TransactionalDocumentRepository
from dealroom.schemas.document import (
    CategoryCardResponse,
    DocumentResponse,
    DocumentRowResponse,
    NotificationResponse,
    RejectedFileResponse,
    StatusResponse,
    UploadEntryResponse,
    UploadResponse,
)
from dealroom.shared.enums import SortField, SortOrder, UploadStatus, UploadSurface
from dealroom.shared.utils.files import sanitize_filename

router = APIRouter()

RepositoryDep = Annotated[TransactionalDocumentRepository, Depends(get_metadata_repository)]


async def _loaded_store(repository: TransactionalDocumentRepository, deal_id: str) -> DocumentStore:
    store = DocumentStore(repository, deal_id)
    await store.refresh()
    return store


@router.get("/{deal_id}/documents", response_model=list[DocumentRowResponse])
async def list_deal_documents(
    deal_id: str,
    repository: RepositoryDep,
    gate: Annotated[AccessGate, Depends(get_access_gate)],
    search: str = "",
    category: str = "all",
    sort_by: SortField = SortField.DATE,
    order: SortOrder = SortOrder.DESC,
) -> list[DocumentRowResponse]:
    """Flat list with search, category filter, and sorting."""
    store = await _loaded_store(repository, deal_id)
    rows = FlatListView(store, gate).rows(
        search=search, category=category, sort_by=sort_by, order=order
    )
    return [
        DocumentRowResponse(
            **asdict(row.document),
            category_label=row.category_label,
            can_preview=row.can_preview,
            can_download=row.can_download,
        )
        for row in rows
    ]


@router.get("/{deal_id}/documents/categories", response_model=list[CategoryCardResponse])
async def list_category_cards(deal_id: str, repository: RepositoryDep) -> list[CategoryCardResponse]:
    """One card per category with status and capacity."""
    store = await _loaded_store(repository, deal_id)
    return [
        CategoryCardResponse(
            key=card.category.key,
            label=card.category.label,
            description=card.category.description,
            required=card.category.required,
            max_files=card.category.max_files,
            count=card.count,
            status=card.status,
            over_limit=card.over_limit,
            remaining_slots=card.remaining_slots,
            documents=[DocumentResponse.model_validate(d) for d in card.documents],
        )
        for card in CategoryView(store).cards()
    ]


@router.get("/{deal_id}/documents/status", response_model=StatusResponse)
async def document_status(deal_id: str, repository: RepositoryDep) -> StatusResponse:
    """Completion stats over the required categories."""
    store = await _loaded_store(repository, deal_id)
    summary = StatusPanel(store).summary()
    return StatusResponse(**asdict(summary))


@router.post(
    "/{deal_id}/documents/{category}",
    response_model=UploadResponse,
    status_code=201,
)
@limit_upload
async def upload_documents(
    request: Request,
    deal_id: str,
    category: str,
    files: Annotated[list[UploadFile], File()],
    repository: RepositoryDep,
    storage: Annotated[IStorageService, Depends(get_storage)],
    notifier: Annotated[CollectingNotifier, Depends(get_notifier)],
    settings: Annotated[Settings, Depends(get_settings)],
    uploaded_by: Annotated[str | None, Depends(get_uploader_id)],
    surface: Annotated[UploadSurface, Query()] = UploadSurface.CATEGORY_SECTION,
) -> UploadResponse:
    """Queue the files for one category and upload them.

    Capacity and validation are checked before anything is written. When no
    file can be queued, or every upload fails, the first error is raised.
    """
    target = get_category(category)
    store = await _loaded_store(repository, deal_id)
    manager = UploadQueueManager(
        deal_id,
        target,
        store=store,
        storage=storage,
        repository=repository,
        surface=surface,
        settings=settings,
        notifier=notifier,
        uploaded_by=uploaded_by,
    )
    picked = [
        LocalFile(
            name=sanitize_filename(f.filename),
            content=await f.read(),
            mime_type=f.content_type,
        )
        for f in files
    ]
    added = manager.add_files(picked)
    if not added.accepted:
        if added.capacity_error is not None:
            raise added.capacity_error
        if added.rejected:
            raise added.rejected[0].error

    try:
        summary = await manager.upload()
    finally:
        await store.close()

    if summary.success == 0:
        failed = next(e for e in manager.entries if e.status is UploadStatus.ERROR)
        assert failed.error is not None
        raise failed.error

    return UploadResponse(
        success=summary.success,
        failed=summary.failed,
        entries=[
            UploadEntryResponse(
                id=e.id,
                name=e.file.name,
                size=e.file.size,
                status=e.status,
                progress=e.progress,
                object_key=e.object_key,
                document_id=e.document_id,
                error_code=e.error.error_code if e.error else None,
                error_message=e.error_message,
            )
            for e in manager.entries
        ],
        rejected=[
            RejectedFileResponse(name=r.file.name, error_code=r.error.error_code, message=r.error.message)
            for r in added.rejected
        ],
        dropped=[f.name for f in added.dropped],
        capacity_error=added.capacity_error.message if added.capacity_error else None,
        notifications=[NotificationResponse(**n.to_dict()) for n in notifier.notifications],
    )
