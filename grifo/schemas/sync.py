"""Sync operation schemas."""

from typing import Any, Literal

from pydantic import model_validator

from grifo.schemas.common import ApiModel, RequestModel, Timestamp

SyncType = Literal["full", "incremental", "entity_specific"]
SyncStatus = Literal["pending", "processing", "completed", "failed", "cancelled"]
SyncEntity = Literal["properties", "inspections", "users", "contests", "uploads"]


class SyncTrigger(RequestModel):
    sync_type: SyncType
    entity_types: list[SyncEntity] | None = None
    force: bool = False

    @model_validator(mode="after")
    def _entities_required_for_entity_specific(self) -> "SyncTrigger":
        if self.sync_type == "entity_specific" and not self.entity_types:
            raise ValueError("entity_types é obrigatório quando sync_type é entity_specific")
        return self


class SyncOperationOut(ApiModel):
    id: str
    company_id: str
    sync_type: str
    entity_types: list[str] | None = None
    status: str
    initiated_by: str | None = None
    retried_by: str | None = None
    retry_count: int
    started_at: Timestamp | None = None
    completed_at: Timestamp | None = None
    duration_seconds: int | None = None
    items_processed: int
    items_failed: int
    error_message: str | None = None
    result: dict[str, Any] | None = None
    created_at: Timestamp
    updated_at: Timestamp
