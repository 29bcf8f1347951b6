"""Document change notification (one metadata row inserted, updated, or deleted)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dealroom.shared.enums import ChangeType
from dealroom.shared.utils.datetime import ensure_utc, utc_now


@dataclass(frozen=True)
class DocumentChangeEvent:
    change_type: ChangeType
    document_id: str
    deal_id: str
    record: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "change_type": self.change_type.value,
            "document_id": self.document_id,
            "deal_id": self.deal_id,
            "record": self.record,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentChangeEvent:
        """Parse a published payload. Raises KeyError/ValueError on malformed data."""
        return cls(
            change_type=ChangeType(data["change_type"]),
            document_id=data["document_id"],
            deal_id=data["deal_id"],
            record=data.get("record"),
            timestamp=ensure_utc(datetime.fromisoformat(data["timestamp"]))
            if data.get("timestamp")
            else utc_now(),
        )
