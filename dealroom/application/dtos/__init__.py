"""Application DTOs (no ORM dependency)."""

from dealroom.application.dtos.change import DocumentChangeEvent
from dealroom.application.dtos.document import DocumentCreate, DocumentResult
from dealroom.application.dtos.upload import (
    AddFilesResult,
    DownloadedFile,
    ExportSummary,
    LocalFile,
    RejectedFile,
    UploadQueueEntry,
    UploadSummary,
)

__all__ = [
    "AddFilesResult",
    "DocumentChangeEvent",
    "DocumentCreate",
    "DocumentResult",
    "DownloadedFile",
    "ExportSummary",
    "LocalFile",
    "RejectedFile",
    "UploadQueueEntry",
    "UploadSummary",
]
