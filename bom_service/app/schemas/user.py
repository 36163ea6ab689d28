from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# --------------------------------------------------------------
# Authentication Schemas
# --------------------------------------------------------------


class UserRegistrationRequest(BaseModel):
    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(
        ..., min_length=8, max_length=128, examples=["strongpassword123"]
    )
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    full_name: Optional[str] = Field(None, max_length=255)


class UserLoginRequest(BaseModel):
    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["strongpassword123"])


class UserResponse(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserLoginResponse(BaseModel):
    user: UserResponse
    expires_at: datetime


class UserLogoutResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Identity of the caller as resolved from the session cookie."""

    user_id: int
    role: Literal["admin", "user"] = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# --------------------------------------------------------------
# Health Schemas
# --------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    database: str
