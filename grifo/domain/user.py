"""SQLAlchemy ORM model for portal / mobile users."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base
from grifo.domain.mixins import AuditMixin, TenantMixin, TimestampMixin, new_id

ROLES = ("super_admin", "admin", "manager", "inspector", "viewer")


class User(Base, TenantMixin, TimestampMixin, AuditMixin):
    __tablename__ = "users"
    __table_args__ = (
        # One live account per email; soft-deleted rows free the address.
        Index(
            "uq_users_email_live",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    role: Mapped[str] = mapped_column(String(20), default="viewer", nullable=False, index=True)
    # "active" | "inactive" | "suspended"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False, index=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
