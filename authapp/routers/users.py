"""
Users router: profile management.

Endpoints:
  PUT /users/me  → update name, phone and/or password
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authapp.core.dependencies import get_current_user
from authapp.database import get_db
from authapp.models.user import User
from authapp.schemas.user import UserOut, UserUpdateRequest
from authapp.services import auth_service

router = APIRouter()


@router.put("/me", response_model=UserOut)
def update_me(
    body: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update profile fields. Only provided fields are changed (PATCH-like behaviour
    even though this is a PUT; all fields in the request body are optional).

    Phone uniqueness is enforced by the credential store (409 on collision).
    Sending the current password again is a no-op, not a re-hash.
    """
    return auth_service.update_profile(
        db,
        current_user,
        name=body.name,
        phone=body.phone,
        password=body.password,
    )
