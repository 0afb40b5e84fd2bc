"""Contest schemas."""

from typing import Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, Name, RequestModel, Timestamp, UUIDStr
from grifo.schemas.property import PropertySummary

ContestStatus = Literal["pending", "under_review", "approved", "rejected"]
ContestPriority = Literal["low", "medium", "high", "urgent"]


class ContestCreate(RequestModel):
    inspection_id: UUIDStr
    contestant_name: Name
    contestant_email: Email
    contestant_phone: str | None = Field(default=None, max_length=50)
    contest_type: str = Field(min_length=2, max_length=50)
    priority: ContestPriority = "medium"
    description: str = Field(min_length=10, max_length=5000)


class ContestUpdate(RequestModel):
    non_nullable = frozenset(
        {"contestant_name", "contestant_email", "contest_type", "priority", "description", "status"}
    )

    contestant_name: Name | None = None
    contestant_email: Email | None = None
    contestant_phone: str | None = Field(default=None, max_length=50)
    contest_type: str | None = Field(default=None, min_length=2, max_length=50)
    priority: ContestPriority | None = None
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    status: Literal["pending", "under_review"] | None = None


class ContestResolve(RequestModel):
    status: Literal["approved", "rejected"]
    resolution_notes: str = Field(min_length=5, max_length=5000)


class ContestReopen(RequestModel):
    reason: str = Field(min_length=5, max_length=2000)


class InspectionRef(ApiModel):
    id: str
    property_id: str
    inspector_id: str | None = None
    status: str
    scheduled_date: Timestamp


class ContestOut(ApiModel):
    id: str
    company_id: str
    inspection_id: str
    contestant_name: str
    contestant_email: str
    contestant_phone: str | None = None
    contest_type: str
    priority: str
    description: str
    status: str
    resolution_notes: str | None = None
    resolved_at: Timestamp | None = None
    resolved_by: str | None = None
    reopen_reason: str | None = None
    created_via: str = "portal"
    created_by: str | None = None
    created_at: Timestamp
    updated_at: Timestamp
    inspection: InspectionRef | None = None


# ---------------------------------------------------------------------------
# Public contest links
# ---------------------------------------------------------------------------

class ContestLinkCreate(RequestModel):
    inspection_id: UUIDStr
    expires_in_days: int = Field(default=7, ge=1, le=30)


class ContestLinkOut(ApiModel):
    id: str
    inspection_id: str
    token: str
    url: str | None = None
    expires_at: Timestamp
    is_used: bool
    used_at: Timestamp | None = None
    contest_id: str | None = None
    created_by: str | None = None
    created_at: Timestamp


class PublicContestSubmit(RequestModel):
    contestant_name: Name
    contestant_email: Email
    contestant_phone: str | None = Field(default=None, max_length=50)
    contest_type: str = Field(default="technical", min_length=2, max_length=50)
    priority: ContestPriority = "medium"
    description: str = Field(min_length=10, max_length=5000)


class PublicCompany(ApiModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None


class PublicInspection(ApiModel):
    id: str
    inspection_type: str
    status: str
    scheduled_date: Timestamp
    completed_date: Timestamp | None = None
    property: PropertySummary | None = None


class PublicContestReceipt(ApiModel):
    contest_id: str
    status: str
    created_at: Timestamp


class PublicContestView(ApiModel):
    contest_link_id: str
    expires_at: Timestamp
    inspection: PublicInspection
    company: PublicCompany
