"""File name, MIME type, and object key helpers.

Object keys follow ``{deal_id}/{category}/{timestamp_ms}-{filename}``. The
folder part is what the existence check lists; the last segment is the name
it looks for.
"""

import mimetypes
import os

# Types mimetypes does not always know about on minimal images.
_EXTRA_TYPES: dict[str, str] = {
    ".csv": "text/csv",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def sanitize_filename(filename: str | None) -> str:
    """Return a safe basename: no path components, NUL bytes, or edge dots/spaces."""
    if not filename or not filename.strip():
        return "unnamed"
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\x00", "").strip(". ")
    return name or "unnamed"


def guess_mime_type(filename: str) -> str | None:
    """Guess a MIME type from the file extension (None when unknown)."""
    ext = os.path.splitext(filename)[1].lower()
    if ext in _EXTRA_TYPES:
        return _EXTRA_TYPES[ext]
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type


def build_object_key(
    deal_id: str, category: str, filename: str, timestamp_ms: int
) -> str:
    """Build the deterministic object key for an upload.

    Args:
        deal_id: Owning deal.
        category: Category key.
        filename: Original file name (sanitized here).
        timestamp_ms: Upload start time in Unix milliseconds.
    """
    return f"{deal_id}/{category}/{timestamp_ms}-{sanitize_filename(filename)}"


def split_object_key(object_key: str) -> tuple[str, str] | None:
    """Split an object key into (folder, filename).

    Returns None when the key has fewer than two non-empty segments.
    """
    parts = [p for p in object_key.split("/") if p]
    if len(parts) < 2:
        return None
    return "/".join(parts[:-1]), parts[-1]
