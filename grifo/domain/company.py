"""SQLAlchemy ORM model for Companies (tenants)."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base
from grifo.domain.mixins import TimestampMixin, new_id


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cnpj: Mapped[Optional[str]] = mapped_column(String(18), unique=True, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    # "basic" | "professional" | "enterprise"
    plan: Mapped[str] = mapped_column(String(20), default="basic", nullable=False)
    # "active" | "inactive" | "suspended"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False, index=True)
    settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
