"""Property schemas, including the list/detail projections."""

from typing import Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, RequestModel, Timestamp

PropertyStatus = Literal["active", "inactive", "rented", "sold"]


class PropertyCreate(RequestModel):
    address: str = Field(min_length=5, max_length=255)
    zip_code: str = Field(pattern=r"^[0-9]{5}-?[0-9]{3}$")
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=2)
    neighborhood: str | None = Field(default=None, max_length=100)
    owner_name: str | None = Field(default=None, max_length=255)
    owner_email: Email | None = None
    owner_phone: str | None = Field(default=None, max_length=50)
    property_type: str = Field(min_length=2, max_length=50)
    area: float | None = Field(default=None, gt=0)
    status: PropertyStatus = "active"
    notes: str | None = Field(default=None, max_length=2000)


class PropertyUpdate(RequestModel):
    non_nullable = frozenset({"address", "zip_code", "city", "state", "property_type", "status"})

    address: str | None = Field(default=None, min_length=5, max_length=255)
    zip_code: str | None = Field(default=None, pattern=r"^[0-9]{5}-?[0-9]{3}$")
    city: str | None = Field(default=None, min_length=2, max_length=100)
    state: str | None = Field(default=None, min_length=2, max_length=2)
    neighborhood: str | None = Field(default=None, max_length=100)
    owner_name: str | None = Field(default=None, max_length=255)
    owner_email: Email | None = None
    owner_phone: str | None = Field(default=None, max_length=50)
    property_type: str | None = Field(default=None, min_length=2, max_length=50)
    area: float | None = Field(default=None, gt=0)
    status: PropertyStatus | None = None
    notes: str | None = Field(default=None, max_length=2000)


class PropertySummary(ApiModel):
    id: str
    address: str
    city: str
    state: str
    zip_code: str
    owner_name: str | None = None


class PropertyOut(ApiModel):
    id: str
    company_id: str
    address: str
    zip_code: str
    city: str
    state: str
    neighborhood: str | None = None
    owner_name: str | None = None
    owner_email: str | None = None
    owner_phone: str | None = None
    property_type: str
    area: float | None = None
    status: str
    notes: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: Timestamp
    updated_at: Timestamp


class InspectionCounts(ApiModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


class InspectionBrief(ApiModel):
    id: str
    inspection_type: str
    status: str
    priority: str
    scheduled_date: Timestamp
    completed_date: Timestamp | None = None
    inspector_id: str | None = None


class PropertyListItem(PropertyOut):
    inspection_counts: InspectionCounts
    last_inspection: InspectionBrief | None = None


class PropertyDetail(PropertyOut):
    inspections: list[InspectionBrief] = []
