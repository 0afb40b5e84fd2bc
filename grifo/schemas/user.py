"""User schemas. ``password_hash`` is never declared on an output model."""

from typing import Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, Name, Password, RequestModel, Timestamp

Role = Literal["super_admin", "admin", "manager", "inspector", "viewer"]
UserStatus = Literal["active", "inactive", "suspended"]


class UserCreate(RequestModel):
    name: Name
    email: Email
    password: Password
    phone: str | None = Field(default=None, max_length=50)
    role: Role = "viewer"


class UserUpdate(RequestModel):
    non_nullable = frozenset({"name", "email", "role", "status"})

    name: Name | None = None
    email: Email | None = None
    phone: str | None = Field(default=None, max_length=50)
    role: Role | None = None
    status: UserStatus | None = None


class UserOut(ApiModel):
    id: str
    company_id: str
    email: str
    name: str
    phone: str | None = None
    role: str
    status: str
    last_login: Timestamp | None = None
    created_at: Timestamp
    updated_at: Timestamp
