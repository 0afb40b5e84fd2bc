"""SQLAlchemy ORM model for Properties."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base
from grifo.domain.mixins import AuditMixin, TenantMixin, TimestampMixin, new_id


class Property(Base, TenantMixin, TimestampMixin, AuditMixin):
    __tablename__ = "properties"
    __table_args__ = (
        Index(
            "uq_properties_address_live",
            "company_id",
            "address",
            "zip_code",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    address: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(10), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    neighborhood: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    property_type: Mapped[str] = mapped_column(String(50), nullable=False)
    area: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    # "active" | "inactive" | "rented" | "sold"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
