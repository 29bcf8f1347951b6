"""Token download route backing the local storage backend's signed URLs."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from dealroom.api.v1.dependencies import get_storage
from dealroom.application.interfaces.storage import IStorageService
from dealroom.domain.exceptions import ResourceNotFoundException
from dealroom.infrastructure.external.storage.local_storage import LocalStorageService
from dealroom.shared.utils.files import guess_mime_type

router = APIRouter()


@router.get("/download/{token}")
async def download_by_token(
    token: str,
    storage: Annotated[IStorageService, Depends(get_storage)],
) -> StreamingResponse:
    """Stream the object behind a live download token (404 otherwise)."""
    if not isinstance(storage, LocalStorageService):
        raise ResourceNotFoundException("download token", token)
    storage_ref = storage.validate_download_token(token)
    if storage_ref is None or not await storage.exists(storage_ref):
        raise ResourceNotFoundException("download token", token)
    return StreamingResponse(
        storage.download(storage_ref),
        media_type=guess_mime_type(storage_ref) or "application/octet-stream",
    )
