"""Upload metadata schemas."""

from typing import Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, RequestModel, Timestamp, UserSummary, UUIDStr

UploadType = Literal[
    "inspection_photos",
    "property_documents",
    "contest_evidence",
    "user_avatar",
    "company_logo",
    "report_attachments",
]


class BulkDeleteRequest(RequestModel):
    file_ids: list[UUIDStr] = Field(min_length=1, max_length=100)


class UploadOut(ApiModel):
    id: str
    company_id: str
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    storage_path: str
    public_url: str | None = None
    upload_type: str
    related_id: str | None = None
    description: str | None = None
    uploaded_by: str | None = None
    created_at: Timestamp
    uploader: UserSummary | None = None
