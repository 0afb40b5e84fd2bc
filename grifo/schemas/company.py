"""Company (tenant) schemas."""

from typing import Any, Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, Name, RequestModel, Timestamp

CompanyPlan = Literal["basic", "professional", "enterprise"]
CompanyStatus = Literal["active", "inactive", "suspended"]


class CompanyCreate(RequestModel):
    name: Name
    cnpj: str | None = Field(default=None, min_length=14, max_length=18)
    email: Email | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: dict[str, Any] | None = None
    plan: CompanyPlan = "basic"
    settings: dict[str, Any] | None = None


class CompanyUpdate(RequestModel):
    non_nullable = frozenset({"name", "plan", "status"})

    name: Name | None = None
    email: Email | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None
    plan: CompanyPlan | None = None
    status: CompanyStatus | None = None


class CompanyOut(ApiModel):
    id: str
    name: str
    cnpj: str | None = None
    email: str | None = None
    phone: str | None = None
    address: dict[str, Any] | None = None
    plan: str
    status: str
    settings: dict[str, Any] | None = None
    created_at: Timestamp
    updated_at: Timestamp
