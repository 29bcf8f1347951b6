"""Pydantic request/response schemas for the HTTP API."""

from dealroom.schemas.document import (
    CategoryCardResponse,
    CategoryResponse,
    DeleteResponse,
    DocumentResponse,
    DocumentRowResponse,
    NotificationResponse,
    RejectedFileResponse,
    SignedUrlResponse,
    StatusResponse,
    UploadEntryResponse,
    UploadResponse,
)
from dealroom.schemas.health import HealthResponse, ReadinessResponse

__all__ = [
    "CategoryCardResponse",
    "CategoryResponse",
    "DeleteResponse",
    "DocumentResponse",
    "DocumentRowResponse",
    "HealthResponse",
    "NotificationResponse",
    "ReadinessResponse",
    "RejectedFileResponse",
    "SignedUrlResponse",
    "StatusResponse",
    "UploadEntryResponse",
    "UploadResponse",
]
