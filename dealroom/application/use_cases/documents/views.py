"""Read projections over a DocumentStore.

CategoryView, StatusPanel, and FlatListView hold no documents of their own;
every call reads the store, so counts always agree across views.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from dealroom.application.dtos.document import DocumentResult
from dealroom.application.use_cases.documents.access import AccessGate, allow_all
from dealroom.application.use_cases.documents.document_store import DocumentStore
from dealroom.domain.categories import Category, categories, get_category
from dealroom.domain.exceptions import ValidationException
from dealroom.shared.enums import CategoryStatus, SortField, SortOrder

ALL_CATEGORIES = "all"


def category_status(category: Category, count: int) -> CategoryStatus:
    if count > 0:
        return CategoryStatus.COMPLETE
    return CategoryStatus.MISSING if category.required else CategoryStatus.OPTIONAL


@dataclass(frozen=True)
class CategoryCard:
    category: Category
    documents: list[DocumentResult]
    status: CategoryStatus

    @property
    def count(self) -> int:
        return len(self.documents)

    @property
    def over_limit(self) -> bool:
        """True when out-of-band inserts pushed the category past its limit."""
        return self.count > self.category.max_files

    @property
    def remaining_slots(self) -> int:
        return max(self.category.max_files - self.count, 0)


class CategoryView:
    """One card per registry category, in registry order."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def cards(self) -> list[CategoryCard]:
        cards = []
        for category in categories():
            docs = self.store.documents_for(category.key)
            cards.append(
                CategoryCard(
                    category=category,
                    documents=docs,
                    status=category_status(category, len(docs)),
                )
            )
        return cards


@dataclass(frozen=True)
class StatusSummary:
    completed: int
    total: int
    percentage: int
    missing: list[str]
    counts: dict[str, int]
    statuses: dict[str, CategoryStatus]


class StatusPanel:
    """Completion stats over the required categories."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def summary(self) -> StatusSummary:
        counts = {c.key: len(self.store.documents_for(c.key)) for c in categories()}
        required = [c for c in categories() if c.required]
        completed = sum(1 for c in required if counts[c.key] > 0)
        total = len(required)
        # Round half up, not to even.
        percentage = int(completed * 100 / total + 0.5) if total else 0
        return StatusSummary(
            completed=completed,
            total=total,
            percentage=percentage,
            missing=[c.key for c in required if counts[c.key] == 0],
            counts=counts,
            statuses={c.key: category_status(c, counts[c.key]) for c in categories()},
        )


@dataclass(frozen=True)
class DocumentRow:
    document: DocumentResult
    category_label: str
    can_preview: bool
    can_download: bool


class FlatListView:
    """Searchable, filterable, sortable list of every document in the store."""

    def __init__(self, store: DocumentStore, access_gate: AccessGate = allow_all) -> None:
        self.store = store
        self.access_gate = access_gate

    def rows(
        self,
        search: str = "",
        category: str = ALL_CATEGORIES,
        sort_by: SortField = SortField.DATE,
        order: SortOrder = SortOrder.DESC,
    ) -> list[DocumentRow]:
        """Filter and sort the store's documents.

        Raises:
            ValidationException: If category is neither "all" nor a registry key.
        """
        docs = self.store.documents
        if category != ALL_CATEGORIES:
            get_category(category)
            docs = [d for d in docs if d.category == category]
        term = search.strip().lower()
        if term:
            docs = [d for d in docs if self._matches(d, term)]
        docs.sort(key=_sort_key(sort_by), reverse=order is SortOrder.DESC)

        rows = []
        for doc in docs:
            allowed = self.access_gate(doc)
            rows.append(
                DocumentRow(
                    document=doc,
                    category_label=_label(doc.category),
                    can_preview=allowed and doc.is_previewable,
                    can_download=allowed,
                )
            )
        return rows

    def _matches(self, document: DocumentResult, term: str) -> bool:
        if term in document.name.lower():
            return True
        return self.store.is_global and term in document.deal_id.lower()


def _sort_key(sort_by: SortField) -> Callable[[DocumentResult], Any]:
    if sort_by is SortField.NAME:
        return lambda d: d.name.lower()
    if sort_by is SortField.SIZE:
        return lambda d: d.size or 0
    return lambda d: d.created_at


def _label(key: str) -> str:
    try:
        return get_category(key).label
    except ValidationException:
        return key
