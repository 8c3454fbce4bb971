"""
Auth router: signup, login, current user, and OTP password reset.

Login (direct, no OTP):
  POST /auth/signup → create local account → return token
  POST /auth/login  → validate credentials → return token

Password reset (email OR phone, never both):
  1. POST /auth/forgot-password → issue OTP on that channel and try to deliver it
  2. POST /auth/reset-password  → verify OTP on the same channel + set new password
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authapp.config import settings
from authapp.core.clock import Clock
from authapp.core.dependencies import get_clock, get_current_user, get_notifier
from authapp.database import get_db
from authapp.models.user import User
from authapp.schemas.auth import (
    SignupRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest,
    AuthResponse, ForgotPasswordResponse, MessageResponse,
)
from authapp.schemas.user import UserAuthResponse, UserOut
from authapp.services import auth_service
from authapp.services.notifier import Notifier

router = APIRouter()


def _auth_payload(result: auth_service.AuthResult) -> dict:
    return {
        "user": UserAuthResponse.model_validate(result.user),
        "token": result.token,
        "token_type": "bearer",
    }


# ── Signup / Login ────────────────────────────────────────────────────────────

@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(
    body: SignupRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a local (email + password) account and sign it in."""
    result = auth_service.signup(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
        clock=clock,
    )
    return _auth_payload(result)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Login with email and password. Unknown email and wrong password look the same."""
    result = auth_service.login(db, email=body.email, password=body.password, clock=clock)
    return _auth_payload(result)


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    """
    Return the authenticated user's profile.
    No DB call needed: get_current_user already fetched the user.
    """
    return current_user


# ── Forgot / Reset Password ───────────────────────────────────────────────────

@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
):
    """
    Issue a reset OTP on the requested channel.
    Delivery is awaited so the response can say whether it went out; a failed
    delivery still returns 200 because the OTP is stored and can be re-sent.
    """
    issue = await auth_service.request_reset(
        db, notifier, email=body.email, phone=body.phone, clock=clock
    )
    if issue.delivered:
        message = f"OTP sent to your {issue.channel.value}"
    else:
        message = "OTP generated but could not be delivered. Please try again."
    return {
        "message": message,
        "channel": issue.channel.value,
        "delivered": issue.delivered,
        "otp": issue.otp if settings.expose_otp_in_response else None,
    }


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Verify OTP and set a new password."""
    auth_service.confirm_reset(
        db,
        otp=body.otp,
        new_password=body.new_password,
        email=body.email,
        phone=body.phone,
        clock=clock,
    )
    return {"message": "Password reset successful"}
