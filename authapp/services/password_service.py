"""Password policy: length rule and change-only re-hashing."""
import logging

from authapp.core.exceptions import ValidationException
from authapp.core.security import hash_password, verify_password
from authapp.models.user import User
from authapp.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6


def validate_password(password: str) -> str:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationException(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return password


def apply_password_change(store: CredentialStore, user: User, new_password: str) -> bool:
    """
    Store a new password hash, but only if the plaintext actually changed.
    Returns True when a write happened. bcrypt is slow on purpose, so re-hashing
    the same password on every profile save is avoided.
    """
    validate_password(new_password)
    if verify_password(new_password, user.password_hash):
        return False
    store.update(user.id, {"password_hash": hash_password(new_password)})
    logger.info(f"Password updated: user={user.id}")
    return True
