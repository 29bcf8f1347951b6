"""Access gate for previews and downloads.

The gate is a predicate over a document. It only hides affordances; it is
not a security boundary. ``DocumentAccessPolicy`` resolves what a viewer may
open from their role and NDA state, by confidentiality level.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from dealroom.application.dtos.document import DocumentResult
from dealroom.shared.enums import AccessLevel

AccessGate = Callable[[DocumentResult], bool]

FULL_ACCESS_ROLES = frozenset({"admin", "staff"})


def allow_all(document: DocumentResult) -> bool:
    return True


def nda_gate(has_accepted_nda: bool, *, requires_nda: bool = True) -> AccessGate:
    """Gate that opens every document once the NDA is accepted (or not required)."""
    allowed = has_accepted_nda or not requires_nda

    def gate(document: DocumentResult) -> bool:
        return allowed

    return gate


@dataclass(frozen=True)
class DocumentAccessPolicy:
    """What a viewer may open, by confidentiality level."""

    access_level: AccessLevel
    can_view_teasers: bool = True
    can_view_cim: bool = False
    can_view_financials: bool = False
    can_view_restricted: bool = False

    @classmethod
    def resolve(
        cls,
        *,
        role: str | None = None,
        has_accepted_nda: bool = False,
        requires_nda: bool = True,
    ) -> DocumentAccessPolicy:
        """Staff and admins see everything; an accepted (or waived) NDA unlocks the CIM."""
        if role and role.lower() in FULL_ACCESS_ROLES:
            return cls(
                access_level=AccessLevel.FULL,
                can_view_cim=True,
                can_view_financials=True,
                can_view_restricted=True,
            )
        if has_accepted_nda or not requires_nda:
            return cls(access_level=AccessLevel.NDA, can_view_cim=True)
        return cls(access_level=AccessLevel.TEASER)

    def can_access(self, confidentiality_level: str | None) -> bool:
        if not confidentiality_level:
            return True
        level = confidentiality_level.lower()
        if level in ("public_teaser", "public"):
            return self.can_view_teasers
        if level in ("cim", "confidential"):
            return self.can_view_cim
        if level == "financials":
            return self.can_view_financials
        if level in ("restricted", "highly_confidential"):
            return self.can_view_restricted
        return self.can_view_teasers

    def gate(self) -> AccessGate:
        return lambda document: self.can_access(document.confidentiality_level)
