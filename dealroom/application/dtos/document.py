"""DTOs for documents (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

PREVIEWABLE_MIME_PREFIXES = ("image/",)
PREVIEWABLE_MIME_TYPES = frozenset({"application/pdf"})


@dataclass(frozen=True)
class DocumentCreate:
    """Input for inserting a metadata row. The upload queue builds this after the object write."""

    id: str
    deal_id: str
    name: str
    object_key: str
    category: str
    size: int | None
    mime_type: str | None
    uploaded_by: str | None = None
    confidentiality_level: str | None = None
    version: int = 1


@dataclass(frozen=True)
class DocumentResult:
    """Document read-model: one metadata row."""

    id: str
    deal_id: str
    name: str
    object_key: str
    category: str
    size: int | None
    mime_type: str | None
    created_at: datetime
    uploaded_by: str | None = None
    confidentiality_level: str | None = None
    version: int = 1

    @property
    def is_previewable(self) -> bool:
        """Images and PDFs can be previewed inline."""
        if not self.mime_type:
            return False
        return (
            self.mime_type in PREVIEWABLE_MIME_TYPES
            or self.mime_type.startswith(PREVIEWABLE_MIME_PREFIXES)
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict (change notifications, websocket)."""
        return {
            "id": self.id,
            "deal_id": self.deal_id,
            "name": self.name,
            "object_key": self.object_key,
            "category": self.category,
            "size": self.size,
            "mime_type": self.mime_type,
            "created_at": self.created_at.isoformat(),
            "uploaded_by": self.uploaded_by,
            "confidentiality_level": self.confidentiality_level,
            "version": self.version,
        }
