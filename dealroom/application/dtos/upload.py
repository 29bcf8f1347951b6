"""DTOs for the upload queue, downloads, and exports."""

from __future__ import annotations

from dataclasses import dataclass, field

from dealroom.domain.exceptions import (
    CapacityExceededException,
    DealRoomException,
    ValidationException,
)
from dealroom.shared.enums import UploadStatus
from dealroom.shared.utils.files import guess_mime_type


@dataclass(frozen=True)
class LocalFile:
    """A file picked by the user, held in memory until uploaded."""

    name: str
    content: bytes
    mime_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def content_type(self) -> str:
        return self.mime_type or guess_mime_type(self.name) or "application/octet-stream"


@dataclass
class UploadQueueEntry:
    """A queued file and its upload state. Transient; never persisted."""

    id: str
    file: LocalFile
    status: UploadStatus = UploadStatus.PENDING
    progress: int = 0
    error: DealRoomException | None = None
    object_key: str | None = None
    document_id: str | None = None

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error is not None else None


@dataclass(frozen=True)
class RejectedFile:
    file: LocalFile
    error: ValidationException


@dataclass(frozen=True)
class AddFilesResult:
    """Outcome of add_files: accepted entries, rejected files, capacity signal."""

    accepted: list[UploadQueueEntry] = field(default_factory=list)
    rejected: list[RejectedFile] = field(default_factory=list)
    dropped: list[LocalFile] = field(default_factory=list)
    capacity_error: CapacityExceededException | None = None


@dataclass(frozen=True)
class UploadSummary:
    success: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.success + self.failed


@dataclass(frozen=True)
class DownloadedFile:
    """Where a downloaded document ended up."""

    name: str
    location: str
    size: int


@dataclass(frozen=True)
class ExportSummary:
    total: int
    exported: int
    failed: int
    archive_path: str
    errors: dict[str, str] = field(default_factory=dict)
