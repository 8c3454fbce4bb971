"""
User schemas: public profile views and update requests.
"""
from pydantic import BaseModel, field_validator, ConfigDict
from typing import Optional
from datetime import datetime


class UserAuthResponse(BaseModel):
    """
    Returned alongside tokens after signup/login.
    password_hash and the OTP columns are never included: Pydantic only exposes
    fields declared here.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    # UUID → str conversion for JSON serialization
    @field_validator("id", mode="before")
    @classmethod
    def uuid_to_str(cls, v) -> str:
        return str(v)


class UserOut(UserAuthResponse):
    """Full profile for the owner (GET /auth/me, PUT /users/me)."""
    auth_mode: str
    avatar_url: Optional[str] = None
    created_at: datetime

    @field_validator("auth_mode", mode="before")
    @classmethod
    def enum_to_str(cls, v) -> str:
        return getattr(v, "value", v)


class UserUpdateRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
