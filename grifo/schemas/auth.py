"""Authentication request/response schemas for portal and mobile users."""

from pydantic import Field

from grifo.schemas.common import ApiModel, Email, Password, RequestModel
from grifo.schemas.user import UserOut


class LoginRequest(RequestModel):
    email: Email
    password: str = Field(min_length=1, max_length=100)


class ChangePasswordRequest(RequestModel):
    current_password: str = Field(min_length=1, max_length=100)
    new_password: Password


class TokenOut(ApiModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserOut
