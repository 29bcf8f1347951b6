"""Shared enumerations for the deal-room document manager.

Cross-cutting enums used by application, infrastructure, and the API layer.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class UploadStatus(_ValuesMixin, str, Enum):
    """Lifecycle of a queued upload entry."""

    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class UploadSurface(_ValuesMixin, str, Enum):
    """Upload surface; each one carries its own per-file size ceiling."""

    DOCUMENTS_PANEL = "documents_panel"
    DOCUMENT_CENTER = "document_center"
    CATEGORY_SECTION = "category_section"


class ChangeType(_ValuesMixin, str, Enum):
    """Kind of row change carried by a document change notification."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class CategoryStatus(_ValuesMixin, str, Enum):
    """Completion status of a category in the projections."""

    COMPLETE = "complete"
    MISSING = "missing"
    OPTIONAL = "optional"


class SortField(_ValuesMixin, str, Enum):
    """Sort key for the flat document list."""

    NAME = "name"
    DATE = "date"
    SIZE = "size"


class SortOrder(_ValuesMixin, str, Enum):
    ASC = "asc"
    DESC = "desc"


class AccessLevel(_ValuesMixin, str, Enum):
    """Resolved document access level for the current viewer."""

    TEASER = "teaser"
    NDA = "nda"
    FULL = "full"


class NotificationVariant(_ValuesMixin, str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"
