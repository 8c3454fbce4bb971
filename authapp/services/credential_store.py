"""
Credential store: the only module that reads or writes `users` rows.

Every write commits before returning. Uniqueness of email / phone / federated_id is
checked up front so the Conflict message can name the field, and the unique indexes
back that up: an IntegrityError from a racing writer is rolled back and surfaces as
the same ConflictException, leaving the row untouched.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authapp.core.clock import Clock, utc_now
from authapp.core.exceptions import ConflictException, NotFoundException, ValidationException
from authapp.core.identity import normalize_phone
from authapp.models.user import User, AuthMode

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "name",
    "email",
    "phone",
    "password_hash",
    "federated_id",
    "auth_mode",
    "avatar_url",
    "otp_state",
})

# field -> label used in Conflict messages
_UNIQUE_FIELDS = {
    "email": "email",
    "phone": "phone number",
    "federated_id": "Google account",
}


def _canonical(fields: dict) -> dict:
    fields = dict(fields)
    if "email" in fields and fields["email"] is not None:
        fields["email"] = fields["email"].strip().lower()
    if "phone" in fields:
        fields["phone"] = normalize_phone(fields["phone"])
    return fields


class CredentialStore:
    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    # ── Reads ─────────────────────────────────────────────────────────────────

    def find_by_id(self, user_id) -> User:
        try:
            key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            raise NotFoundException("User")
        user = self.db.get(User, key)
        if user is None:
            raise NotFoundException("User")
        return user

    def find_by_identity(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        federated_id: Optional[str] = None,
    ) -> User:
        """
        Look up one record by any of the given identifiers (OR semantics).

        Raises NotFoundException if nothing matches and ConflictException if the
        identifiers point at two different accounts.
        """
        criteria = _canonical({"email": email, "phone": phone})
        clauses = []
        if criteria["email"]:
            clauses.append(User.email == criteria["email"])
        if criteria["phone"]:
            clauses.append(User.phone == criteria["phone"])
        if federated_id:
            clauses.append(User.federated_id == federated_id)
        if not clauses:
            raise ValidationException("An email, phone number or federated id is required")

        matches = self.db.query(User).filter(or_(*clauses)).limit(2).all()
        if not matches:
            raise NotFoundException("User")
        if len(matches) > 1:
            raise ConflictException("These identifiers belong to different accounts")
        return matches[0]

    # ── Writes ────────────────────────────────────────────────────────────────

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password_hash: Optional[str] = None,
        federated_id: Optional[str] = None,
        auth_mode: AuthMode = AuthMode.LOCAL,
        avatar_url: Optional[str] = None,
    ) -> User:
        fields = _canonical({
            "name": name,
            "email": email,
            "phone": phone,
            "password_hash": password_hash,
            "federated_id": federated_id,
            "auth_mode": auth_mode,
            "avatar_url": avatar_url,
        })
        if not fields["email"] and not fields["phone"]:
            raise ValidationException("An account needs an email or a phone number")
        if fields["auth_mode"] == AuthMode.LOCAL and not fields["password_hash"]:
            raise ValidationException("Please add a password")

        self._ensure_unique(fields)

        user = User(**fields, created_at=self.clock())
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info(f"Credential record created: id={user.id}, mode={user.auth_mode.value}")
        return user

    def update(self, user_id, fields: dict) -> User:
        """
        Merge `fields` into the record and commit in one step.
        Passing a field that isn't in UPDATABLE_FIELDS is a programming error.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        user = self.find_by_id(user_id)
        fields = _canonical(fields)
        if not fields.get("email", user.email) and not fields.get("phone", user.phone):
            raise ValidationException("An account needs an email or a phone number")
        self._ensure_unique(fields, exclude_id=user.id)

        for key, value in fields.items():
            setattr(user, key, value)
        self._commit()
        self.db.refresh(user)
        return user

    # ── Internals ─────────────────────────────────────────────────────────────

    def _ensure_unique(self, fields: dict, exclude_id=None) -> None:
        for field, label in _UNIQUE_FIELDS.items():
            value = fields.get(field)
            if value is None:
                continue
            query = self.db.query(User.id).filter(getattr(User, field) == value)
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise ConflictException(f"An account with this {label} already exists")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("An account with these details already exists")
