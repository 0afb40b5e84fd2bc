"""Client-portal schemas: registration, login, profile and admin management."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, Name, Password, RequestModel, Timestamp

ClientStatus = Literal["active", "inactive", "suspended"]


class ClientRegister(RequestModel):
    name: Name
    email: Email
    password: Password
    phone: str | None = Field(default=None, max_length=20)
    document: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=20)


class ClientLogin(RequestModel):
    email: Email
    password: str = Field(min_length=1, max_length=100)


class ClientProfileUpdate(RequestModel):
    non_nullable = frozenset({"name"})

    name: Name | None = None
    phone: str | None = Field(default=None, max_length=20)
    document: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    zip_code: str | None = Field(default=None, max_length=20)


class ClientStatusUpdate(RequestModel):
    status: ClientStatus


class ClientOut(ApiModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    document: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    status: str
    created_at: Timestamp
    updated_at: Timestamp


class ClientSessionOut(ApiModel):
    token: str
    expires_at: datetime
    client: ClientOut
