"""Document API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dealroom.shared.enums import CategoryStatus, UploadStatus


class NotificationResponse(BaseModel):
    title: str
    message: str
    variant: str = "default"


class CategoryResponse(BaseModel):
    """One registry category."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    label: str
    description: str
    required: bool
    max_files: int
    accepted_extensions: list[str]


class DocumentResponse(BaseModel):
    """One document metadata row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    deal_id: str
    name: str
    object_key: str
    category: str
    size: int | None = None
    mime_type: str | None = None
    created_at: datetime
    uploaded_by: str | None = None
    confidentiality_level: str | None = None
    version: int = 1


class DocumentRowResponse(DocumentResponse):
    """Flat list row with display label and affordance flags."""

    category_label: str
    can_preview: bool
    can_download: bool


class CategoryCardResponse(BaseModel):
    key: str
    label: str
    description: str
    required: bool
    max_files: int
    count: int
    status: CategoryStatus
    over_limit: bool
    remaining_slots: int
    documents: list[DocumentResponse]


class StatusResponse(BaseModel):
    """Completion stats over the required categories."""

    completed: int
    total: int
    percentage: int = Field(ge=0, le=100)
    missing: list[str]
    counts: dict[str, int]
    statuses: dict[str, CategoryStatus]


class UploadEntryResponse(BaseModel):
    id: str
    name: str
    size: int
    status: UploadStatus
    progress: int
    object_key: str | None = None
    document_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None


class RejectedFileResponse(BaseModel):
    name: str
    error_code: str
    message: str


class UploadResponse(BaseModel):
    """Result of POST /deals/{deal_id}/documents/{category}."""

    success: int
    failed: int
    entries: list[UploadEntryResponse]
    rejected: list[RejectedFileResponse] = []
    dropped: list[str] = []
    capacity_error: str | None = None
    notifications: list[NotificationResponse] = []


class SignedUrlResponse(BaseModel):
    url: str
    expires_in_seconds: int


class DeleteResponse(BaseModel):
    id: str
    deleted: bool = True
    notifications: list[NotificationResponse] = []
