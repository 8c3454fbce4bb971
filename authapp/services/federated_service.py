"""
Federated identity reconciliation: merge verified OAuth claims into a credential
record without clobbering anything the user already has.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from authapp.core.exceptions import NotFoundException
from authapp.core.identity import NAME_MAX_LENGTH, normalize_email, normalize_phone, validate_name
from authapp.core.security import hash_password
from authapp.models.user import User, AuthMode
from authapp.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FederatedClaims:
    """Identity asserted by the provider after token verification."""
    email: str
    federated_id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


def _display_name(claims: FederatedClaims, email: str) -> str:
    if claims.name and claims.name.strip():
        return claims.name.strip()[:NAME_MAX_LENGTH]
    return email.split("@", 1)[0][:NAME_MAX_LENGTH]


def _unclaimed_phone(store: CredentialStore, phone: Optional[str], user_id=None) -> Optional[str]:
    """The provider's phone, or None when another account already holds it."""
    if not phone:
        return None
    try:
        owner = store.find_by_identity(phone=phone)
    except NotFoundException:
        return phone
    if owner.id == user_id:
        return phone
    logger.warning(f"Google phone already registered to another account, not linking: owner={owner.id}")
    return None


def reconcile_federated_identity(store: CredentialStore, claims: FederatedClaims) -> tuple[User, bool]:
    """
    Returns (user, is_new_user).

    Existing account (matched by email only):
      - federated_id is filled in if empty; an existing binding is never replaced
      - phone / avatar are filled in if empty, never overwritten
      - a phone already held by another account is skipped, not a 409
      - nothing is written when nothing changed
    No account: a federated record is created with an unusable random password
    hash, so every record has a hash and no consumer has to special-case None.
    """
    email = normalize_email(claims.email)
    phone = normalize_phone(claims.phone)

    try:
        user = store.find_by_identity(email=email)
    except NotFoundException:
        user = None

    if user is not None:
        changes = {}
        if not user.federated_id and claims.federated_id:
            changes["federated_id"] = claims.federated_id
        if not user.phone and _unclaimed_phone(store, phone, user.id):
            changes["phone"] = phone
        if claims.avatar_url and not user.avatar_url:
            changes["avatar_url"] = claims.avatar_url
        if changes:
            user = store.update(user.id, changes)
        logger.info(f"Existing user logged in via Google: user={user.id}, updated={sorted(changes)}")
        return user, False

    user = store.create(
        name=validate_name(_display_name(claims, email)),
        email=email,
        phone=_unclaimed_phone(store, phone),
        password_hash=hash_password(secrets.token_urlsafe(32)),
        federated_id=claims.federated_id,
        auth_mode=AuthMode.FEDERATED,
        avatar_url=claims.avatar_url,
    )
    logger.info(f"New user created via Google: user={user.id}")
    return user, True
