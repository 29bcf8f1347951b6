"""ORM models."""

from dealroom.infrastructure.persistence.models.document import Document

__all__ = ["Document"]
