"""SQLAlchemy ORM models for Inspections, their Contests and public contest links."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grifo.db.base import Base
from grifo.domain.mixins import AuditMixin, TenantMixin, TimestampMixin, new_id

INSPECTION_STATUSES = ("pending", "in_progress", "completed", "cancelled")
OPEN_INSPECTION_STATUSES = ("pending", "in_progress")

CONTEST_STATUSES = ("pending", "under_review", "approved", "rejected")
OPEN_CONTEST_STATUSES = ("pending", "under_review")


class Inspection(Base, TenantMixin, TimestampMixin, AuditMixin):
    __tablename__ = "inspections"
    __table_args__ = (
        # At most one open inspection per property.
        Index(
            "uq_inspections_open_per_property",
            "property_id",
            unique=True,
            postgresql_where=text(
                "status IN ('pending', 'in_progress') AND deleted_at IS NULL"
            ),
            sqlite_where=text(
                "status IN ('pending', 'in_progress') AND deleted_at IS NULL"
            ),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inspector_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    inspection_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # "low" | "medium" | "high"
    priority: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)
    # "pending" | "in_progress" | "completed" | "cancelled"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)

    scheduled_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    inspector_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    report: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    property: Mapped["Property"] = relationship(lazy="selectin")
    inspector: Mapped[Optional["User"]] = relationship(lazy="selectin")


class Contest(Base, TenantMixin, TimestampMixin, AuditMixin):
    """A dispute raised against an inspection result."""

    __tablename__ = "contests"
    __table_args__ = (
        # At most one open contest per inspection.
        Index(
            "uq_contests_open_per_inspection",
            "inspection_id",
            unique=True,
            postgresql_where=text(
                "status IN ('pending', 'under_review') AND deleted_at IS NULL"
            ),
            sqlite_where=text(
                "status IN ('pending', 'under_review') AND deleted_at IS NULL"
            ),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    inspection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True
    )

    contestant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contestant_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contestant_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contest_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # "low" | "medium" | "high" | "urgent"
    priority: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # "pending" | "under_review" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    reopen_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "portal" | "public_link"
    created_via: Mapped[str] = mapped_column(String(20), default="portal", nullable=False)

    inspection: Mapped["Inspection"] = relationship(lazy="selectin")


class ContestLink(Base, TenantMixin, TimestampMixin, AuditMixin):
    """Single-use public link that lets a tenant or owner contest an inspection."""

    __tablename__ = "contest_links"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    inspection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    contest_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    contestant_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contestant_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    inspection: Mapped["Inspection"] = relationship(lazy="selectin")
