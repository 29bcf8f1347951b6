"""Tests for the category registry."""

import pytest

from dealroom.domain.categories import (
    CATEGORY_KEYS,
    categories,
    documents_for,
    get_category,
    is_known_category,
    required_categories,
)
from dealroom.domain.exceptions import ValidationException
from tests.fakes import make_document


def test_registry_order_and_keys() -> None:
    """Categories come back in display order."""
    assert CATEGORY_KEYS == (
        "cim",
        "financials",
        "legal",
        "due_diligence",
        "nda",
        "buyer_notes",
        "other",
    )
    assert [c.key for c in categories()] == list(CATEGORY_KEYS)


def test_required_categories() -> None:
    assert [c.key for c in required_categories()] == [
        "cim",
        "financials",
        "legal",
        "due_diligence",
    ]


@pytest.mark.parametrize(
    ("key", "max_files"),
    [("cim", 1), ("financials", 10), ("legal", 20), ("due_diligence", 15), ("nda", 5)],
)
def test_max_files(key: str, max_files: int) -> None:
    assert get_category(key).max_files == max_files


def test_get_category_unknown_raises() -> None:
    with pytest.raises(ValidationException) as exc_info:
        get_category("tax_returns")
    assert exc_info.value.details == {"field": "category"}
    assert not is_known_category("tax_returns")
    assert is_known_category("cim")


def test_accepts_by_extension_or_mime() -> None:
    cim = get_category("cim")
    assert cim.accepts("Deck.PDF", None)
    assert cim.accepts("scan.jpeg", "image/jpeg")
    assert cim.accepts("no-extension", "application/pdf")
    assert not cim.accepts("archive.zip", "application/zip")
    assert ".xlsx" in cim.accepted_extensions


def test_documents_for_filters_and_keeps_order() -> None:
    docs = [
        make_document("a", category="legal"),
        make_document("b", category="cim"),
        make_document("c", category="legal"),
    ]
    assert [d.id for d in documents_for(docs, "legal")] == ["a", "c"]
