"""SQLAlchemy ORM model for sync operations (durable job status table)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from grifo.db.base import Base
from grifo.domain.mixins import TenantMixin, TimestampMixin, new_id

SYNC_TYPES = ("full", "incremental", "entity_specific")
SYNC_STATUSES = ("pending", "processing", "completed", "failed", "cancelled")
ACTIVE_SYNC_STATUSES = ("pending", "processing")
SYNC_ENTITY_TYPES = ("properties", "inspections", "users", "contests", "uploads")


class SyncOperation(Base, TenantMixin, TimestampMixin):
    __tablename__ = "sync_operations"
    __table_args__ = (
        # One active operation per company.
        Index(
            "uq_sync_operations_active_per_company",
            "company_id",
            unique=True,
            postgresql_where=text("status IN ('pending', 'processing')"),
            sqlite_where=text("status IN ('pending', 'processing')"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    sync_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_types: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    # "pending" | "processing" | "completed" | "failed" | "cancelled"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)

    initiated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    retried_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    items_processed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    items_failed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    result: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
