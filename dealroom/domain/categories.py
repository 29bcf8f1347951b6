"""Category registry: the fixed set of document categories of a deal room.

Categories are static policy. Each one has a display label, a required flag
used by the completion stats, a per-deal file limit, and the accepted file
types. The registry order is the display order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dealroom.domain.exceptions import ValidationException

if TYPE_CHECKING:
    from dealroom.application.dtos.document import DocumentResult

# MIME type -> accepted extensions (same set for every category).
ACCEPTED_FILE_TYPES: dict[str, tuple[str, ...]] = {
    "application/pdf": (".pdf",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        ".docx",
    ),
    "application/vnd.ms-excel": (".xls",),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (".xlsx",),
    "text/csv": (".csv",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
}


@dataclass(frozen=True)
class Category:
    """A document category (immutable policy)."""

    key: str
    label: str
    description: str
    required: bool
    max_files: int
    accepted: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(ACCEPTED_FILE_TYPES)
    )

    @property
    def accepted_extensions(self) -> frozenset[str]:
        return frozenset(ext for exts in self.accepted.values() for ext in exts)

    def accepts(self, filename: str, mime_type: str | None) -> bool:
        """Return True when the file's extension or MIME type is accepted."""
        lowered = filename.lower()
        if any(lowered.endswith(ext) for ext in self.accepted_extensions):
            return True
        return mime_type is not None and mime_type in self.accepted


_CATEGORIES: tuple[Category, ...] = (
    Category(
        key="cim",
        label="Confidential Information Memorandum",
        description="Comprehensive business overview for qualified buyers",
        required=True,
        max_files=1,
    ),
    Category(
        key="financials",
        label="Financial Statements",
        description="Last 3 years P&L, balance sheets, cash flow statements",
        required=True,
        max_files=10,
    ),
    Category(
        key="legal",
        label="Legal Documentation",
        description="Articles of incorporation, key contracts, IP documentation",
        required=True,
        max_files=20,
    ),
    Category(
        key="due_diligence",
        label="Due Diligence Package",
        description="Customer lists, vendor agreements, operational details",
        required=True,
        max_files=15,
    ),
    Category(
        key="nda",
        label="Non-Disclosure Agreement",
        description="Mutual NDA templates and signed agreements",
        required=False,
        max_files=5,
    ),
    Category(
        key="buyer_notes",
        label="Buyer Information",
        description="Buyer profiles, LOIs, and communication records",
        required=False,
        max_files=10,
    ),
    Category(
        key="other",
        label="Additional Documents",
        description="Supporting materials and miscellaneous files",
        required=False,
        max_files=20,
    ),
)

_BY_KEY: dict[str, Category] = {c.key: c for c in _CATEGORIES}

CATEGORY_KEYS: tuple[str, ...] = tuple(_BY_KEY)


def categories() -> list[Category]:
    """Return all categories in display order."""
    return list(_CATEGORIES)


def required_categories() -> list[Category]:
    return [c for c in _CATEGORIES if c.required]


def is_known_category(key: str) -> bool:
    return key in _BY_KEY


def get_category(key: str) -> Category:
    """Look up a category by key.

    Raises:
        ValidationException: If the key is not in the registry.
    """
    try:
        return _BY_KEY[key]
    except KeyError:
        raise ValidationException(
            f"Unknown document category: {key}", field="category"
        ) from None


def documents_for(
    documents: Iterable[DocumentResult], key: str
) -> list[DocumentResult]:
    """Filter documents down to one category, preserving order."""
    return [d for d in documents if d.category == key]
