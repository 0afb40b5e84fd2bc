"""Inspection schemas. Joined rows are projected into nested objects."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, RequestModel, Timestamp, UserSummary, UUIDStr
from grifo.schemas.property import PropertySummary

InspectionStatus = Literal["pending", "in_progress", "completed", "cancelled"]
InspectionPriority = Literal["low", "medium", "high"]


class InspectionCreate(RequestModel):
    property_id: UUIDStr
    inspector_id: UUIDStr
    inspection_type: str = Field(min_length=2, max_length=50)
    scheduled_date: datetime
    priority: InspectionPriority = "medium"
    notes: str | None = Field(default=None, max_length=2000)


class InspectionUpdate(RequestModel):
    non_nullable = frozenset({"inspector_id", "inspection_type", "scheduled_date", "priority", "status"})

    inspector_id: UUIDStr | None = None
    inspection_type: str | None = Field(default=None, min_length=2, max_length=50)
    scheduled_date: datetime | None = None
    priority: InspectionPriority | None = None
    status: InspectionStatus | None = None
    notes: str | None = Field(default=None, max_length=2000)
    inspector_notes: str | None = Field(default=None, max_length=5000)
    report: dict[str, Any] | None = None


class InspectionOut(ApiModel):
    id: str
    company_id: str
    property_id: str
    inspector_id: str | None = None
    inspection_type: str
    priority: str
    status: str
    scheduled_date: Timestamp
    completed_date: Timestamp | None = None
    notes: str | None = None
    inspector_notes: str | None = None
    report: dict[str, Any] | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: Timestamp
    updated_at: Timestamp
    property: PropertySummary | None = None
    inspector: UserSummary | None = None
