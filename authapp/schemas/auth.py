"""
Auth schemas: request bodies and responses for signup, login, Google sign-in and
password reset.

Field rules (name length, password length, phone shape) are enforced by the
service layer so the same checks apply however the service is called; the
schemas only pin down types and required keys.
"""
from pydantic import BaseModel, EmailStr, model_validator
from typing import Optional

from authapp.schemas.user import UserAuthResponse


class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class GoogleAuthRequest(BaseModel):
    id_token: str


class ForgotPasswordRequest(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def one_identifier(self) -> "ForgotPasswordRequest":
        if bool(self.email) == bool(self.phone and self.phone.strip()):
            raise ValueError("Provide either email or phone")
        return self


class ResetPasswordRequest(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    otp: str
    new_password: str

    @model_validator(mode="after")
    def one_identifier(self) -> "ResetPasswordRequest":
        if bool(self.email) == bool(self.phone and self.phone.strip()):
            raise ValueError("Provide either email or phone")
        return self


class AuthResponse(BaseModel):
    user: UserAuthResponse
    token: str
    token_type: str = "bearer"


class GoogleAuthResponse(AuthResponse):
    message: str
    is_new_user: bool


class ForgotPasswordResponse(BaseModel):
    message: str
    channel: str
    delivered: bool
    # Only populated when EXPOSE_OTP_IN_RESPONSE is on (local testing)
    otp: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
