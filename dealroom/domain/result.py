"""Uniform result type for document operations.

Download, preview, and delete return ``Result`` instead of raising so every
caller sees one error shape: ``result.error.error_code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from dealroom.domain.exceptions import DealRoomException

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation: a value or a DealRoomException."""

    value: T | None = None
    error: DealRoomException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_code(self) -> str | None:
        return self.error.error_code if self.error is not None else None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: DealRoomException) -> Result[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
