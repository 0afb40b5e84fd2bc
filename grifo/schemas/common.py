"""Shared Pydantic schema base and reusable field types."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar

from fastapi import Path
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from grifo.domain.mixins import as_utc

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

# Normalized email: validated, then lowercased.
Email = Annotated[EmailStr, AfterValidator(lambda v: v.lower())]
UUIDStr = Annotated[str, Field(pattern=UUID_PATTERN)]
Password = Annotated[str, Field(min_length=6, max_length=100)]
Name = Annotated[str, Field(min_length=2, max_length=255)]
# Timestamps read back from SQLite are naive; expose them as UTC.
Timestamp = Annotated[datetime, AfterValidator(as_utc)]


class ApiModel(BaseModel):
    """All API schemas inherit from this; ORM rows validate via from_attributes."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RequestModel(ApiModel):
    """Request bodies reject unknown keys so typos surface as 400s."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    # Fields that may be omitted but never sent as an explicit null.
    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name in cls.non_nullable:
            raise ValueError("não pode ser nulo")
        return value

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class UserSummary(ApiModel):
    id: str
    name: str
    email: str


# Path parameter carrying a resource id; malformed ids are a 400.
IdPath = Annotated[str, Path(pattern=UUID_PATTERN)]
