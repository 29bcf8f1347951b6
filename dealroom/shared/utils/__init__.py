"""Shared utilities: datetime, generators, file names and object keys."""

from dealroom.shared.utils.datetime import ensure_utc, utc_now, utc_now_ms
from dealroom.shared.utils.files import (
    build_object_key,
    guess_mime_type,
    sanitize_filename,
    split_object_key,
)
from dealroom.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "utc_now_ms",
    "ensure_utc",
    "build_object_key",
    "guess_mime_type",
    "sanitize_filename",
    "split_object_key",
]
