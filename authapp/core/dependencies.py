"""
FastAPI dependencies used across routers.
Keep this file lean: only auth/DB/collaborator lookups go here.
Business logic belongs in services/.

Collaborators (notifier, OAuth verifier, content generator, clock) are built once in
create_app() and parked on app.state; these helpers hand them to the endpoints.
"""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from authapp.core.clock import Clock
from authapp.core.exceptions import CredentialsException
from authapp.database import get_db
from authapp.models.user import User
from authapp.services import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_notifier(request: Request):
    return request.app.state.notifier


def get_oauth_verifier(request: Request):
    return request.app.state.oauth_verifier


def get_content_generator(request: Request):
    return request.app.state.content_generator


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validates the Bearer session token and returns the authenticated User.

    Checks performed (in order):
    1. Authorization header is present and uses the Bearer scheme
    2. Token signature, expiry and shape (SessionTokenException otherwise)
    3. 'sub' maps to a real user
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise CredentialsException("No authorization token found")
    return auth_service.validate_session(db, credentials.credentials)
