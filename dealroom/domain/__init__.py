"""Domain layer: category registry, exceptions, result type."""

from dealroom.domain.categories import (
    ACCEPTED_FILE_TYPES,
    CATEGORY_KEYS,
    Category,
    categories,
    documents_for,
    get_category,
    is_known_category,
    required_categories,
)
from dealroom.domain.exceptions import (
    AccessDeniedException,
    CapacityExceededException,
    DealRoomException,
    DocumentNotFoundException,
    DownloadFailedError,
    MetadataReadException,
    MetadataWriteException,
    ResourceNotFoundException,
    ValidationException,
)
from dealroom.domain.result import Result

__all__ = [
    "ACCEPTED_FILE_TYPES",
    "CATEGORY_KEYS",
    "Category",
    "categories",
    "documents_for",
    "get_category",
    "is_known_category",
    "required_categories",
    "AccessDeniedException",
    "CapacityExceededException",
    "DealRoomException",
    "DocumentNotFoundException",
    "DownloadFailedError",
    "MetadataReadException",
    "MetadataWriteException",
    "ResourceNotFoundException",
    "ValidationException",
    "Result",
]
