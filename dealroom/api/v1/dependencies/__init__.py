"""FastAPI dependencies."""

from dealroom.api.v1.dependencies.document import (
    get_access_gate,
    get_access_policy,
    get_deletion_coordinator,
    get_document_or_404,
    get_download_broker,
    get_http_client,
    get_metadata_repository,
    get_notifier,
    get_storage,
    get_uploader_id,
)

__all__ = [
    "get_access_gate",
    "get_access_policy",
    "get_deletion_coordinator",
    "get_document_or_404",
    "get_download_broker",
    "get_http_client",
    "get_metadata_repository",
    "get_notifier",
    "get_storage",
    "get_uploader_id",
]
