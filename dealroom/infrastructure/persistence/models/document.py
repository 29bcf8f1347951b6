"""Document metadata row: one stored object of a deal, in one category."""

from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dealroom.domain.categories import CATEGORY_KEYS
from dealroom.infrastructure.persistence.database import Base
from dealroom.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin

_TAG_VALUES = ", ".join(f"'{key}'" for key in CATEGORY_KEYS)


class Document(CuidMixin, CreatedAtMixin, Base):
    """Metadata for a document stored under file_path in object storage."""

    __tablename__ = "documents"

    deal_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    file_type: Mapped[str | None] = mapped_column(String, nullable=True)
    tag: Mapped[str] = mapped_column(String(32), nullable=False)
    confidentiality_level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    uploaded_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_documents_deal_tag", "deal_id", "tag"),
        CheckConstraint(f"tag IN ({_TAG_VALUES})", name="ck_documents_tag_known"),
    )
