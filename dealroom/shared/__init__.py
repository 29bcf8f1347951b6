"""Shared enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from dealroom.shared.enums import (
    AccessLevel,
    CategoryStatus,
    ChangeType,
    NotificationVariant,
    SortField,
    SortOrder,
    UploadStatus,
    UploadSurface,
)
from dealroom.shared.utils import ensure_utc, generate_cuid, utc_now, utc_now_ms

__all__ = [
    "AccessLevel",
    "CategoryStatus",
    "ChangeType",
    "NotificationVariant",
    "SortField",
    "SortOrder",
    "UploadStatus",
    "UploadSurface",
    "generate_cuid",
    "utc_now",
    "utc_now_ms",
    "ensure_utc",
]
