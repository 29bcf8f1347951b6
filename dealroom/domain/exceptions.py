"""Domain exceptions for the deal-room document manager.

Business rule violations and operation failures. Every exception carries a
machine-readable ``error_code``; the API layer maps codes to HTTP statuses
and the operations return them inside ``Result`` values.
"""

from typing import Any


class DealRoomException(Exception):
    """Base exception for all document manager errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. category, document_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DealRoomException):
    """Raised when input validation fails (unknown category, bad type, too large)."""

    def __init__(
        self, message: str, field: str | None = None, **extra: Any
    ) -> None:
        details: dict[str, Any] = {"field": field} if field else {}
        details.update(extra)
        super().__init__(message, "VALIDATION_ERROR", details)


class CapacityExceededException(DealRoomException):
    """Raised when adding files would push a category past its file limit."""

    def __init__(self, category_label: str, max_files: int, dropped: int = 0) -> None:
        super().__init__(
            f"Maximum {max_files} files allowed for {category_label}",
            "CAPACITY_EXCEEDED",
            {"category": category_label, "max_files": max_files, "dropped": dropped},
        )
        self.category_label = category_label
        self.max_files = max_files
        self.dropped = dropped


class ResourceNotFoundException(DealRoomException):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} with id '{resource_id}' not found",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DocumentNotFoundException(DealRoomException):
    """Raised when a document's object is missing from storage."""

    def __init__(self, name: str, object_key: str | None = None) -> None:
        super().__init__(
            f"{name} is not available in storage. "
            "The file may have been moved or deleted.",
            "DOCUMENT_NOT_FOUND",
            {"name": name, "object_key": object_key},
        )


class MetadataWriteException(DealRoomException):
    """Raised when inserting or deleting a metadata row fails."""

    def __init__(self, operation: str, reason: str, **extra: Any) -> None:
        super().__init__(
            f"Failed to {operation} document metadata",
            "METADATA_WRITE_ERROR",
            {"operation": operation, "reason": reason, **extra},
        )


class MetadataReadException(DealRoomException):
    """Raised when listing or reading metadata rows fails."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Failed to load documents",
            "METADATA_READ_ERROR",
            {"reason": reason},
        )


class DownloadFailedError(DealRoomException):
    """Raised when fetching a signed URL fails (non-2xx or transport error)."""

    def __init__(
        self, name: str, status_code: int | None = None, reason: str | None = None
    ) -> None:
        if status_code is not None:
            message = f"Download failed with status: {status_code}"
        else:
            message = f"Download failed: {reason or 'network error'}"
        super().__init__(
            message,
            "DOWNLOAD_FAILED",
            {"name": name, "status_code": status_code, "reason": reason},
        )
        self.status_code = status_code


class AccessDeniedException(DealRoomException):
    """Raised when the access gate refuses a document."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Access to {name} requires an accepted NDA",
            "ACCESS_DENIED",
            {"name": name},
        )
