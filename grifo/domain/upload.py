"""SQLAlchemy ORM model for uploaded file metadata (the bytes live in object storage)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grifo.db.base import Base
from grifo.domain.mixins import TenantMixin, TimestampMixin, new_id

UPLOAD_TYPES = (
    "inspection_photos",
    "property_documents",
    "contest_evidence",
    "user_avatar",
    "company_logo",
    "report_attachments",
)


class Upload(Base, TenantMixin, TimestampMixin):
    __tablename__ = "uploads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)

    # Object storage reference
    storage_path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    public_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    upload_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Polymorphic reference (inspection, property, contest, user, company)
    related_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    uploaded_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    uploader: Mapped[Optional["User"]] = relationship(lazy="selectin")
