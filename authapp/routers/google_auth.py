"""
Google sign-in: POST /auth/google with the ID token obtained on the device.
First login creates a federated account; later logins reuse the one matched by email.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authapp.core.clock import Clock
from authapp.core.dependencies import get_clock, get_oauth_verifier
from authapp.database import get_db
from authapp.schemas.auth import GoogleAuthRequest, GoogleAuthResponse
from authapp.schemas.user import UserAuthResponse
from authapp.services import auth_service

router = APIRouter()


@router.post("/google", response_model=GoogleAuthResponse)
def google_auth(
    body: GoogleAuthRequest,
    db: Session = Depends(get_db),
    verifier=Depends(get_oauth_verifier),
    clock: Clock = Depends(get_clock),
):
    claims = verifier.verify(body.id_token)
    result = auth_service.federated_login(db, claims, clock=clock)
    return {
        "message": "Account created with Google" if result.is_new_user else "Google login successful",
        "is_new_user": result.is_new_user,
        "user": UserAuthResponse.model_validate(result.user),
        "token": result.token,
        "token_type": "bearer",
    }
