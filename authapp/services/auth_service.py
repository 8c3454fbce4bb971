"""
Auth service: the operations the HTTP layer exposes, built from the lower-level
pieces (credential store, password policy, OTP service, federated reconciler,
session tokens). Keeps routers thin: routers only handle HTTP, services handle logic.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from authapp.core.clock import Clock, utc_now
from authapp.core.exceptions import (
    InvalidCredentialsException,
    NotFoundException,
    UnknownAccountException,
    ValidationException,
)
from authapp.core.identity import normalize_email, normalize_phone, validate_name, validate_phone
from authapp.core.security import hash_password, verify_password, issue_session_token, validate_session_token, pwd_context
from authapp.models.user import User, AuthMode, OtpChannel
from authapp.services import otp_service
from authapp.services.credential_store import CredentialStore
from authapp.services.federated_service import FederatedClaims, reconcile_federated_identity
from authapp.services.notifier import Notifier
from authapp.services.password_service import apply_password_change, validate_password

logger = logging.getLogger(__name__)

# Pre-computed bcrypt hash used ONLY for constant-time comparison when the user
# doesn't exist, so timing can't reveal which emails are registered.
_DUMMY_HASH: str = pwd_context.hash("__dummy_timing_prevention__")


@dataclass
class AuthResult:
    user: User
    token: str


@dataclass
class FederatedAuthResult(AuthResult):
    is_new_user: bool


@dataclass
class ResetIssue:
    """
    Outcome of a reset request. `delivered` is False when the provider failed:
    the OTP is still stored and valid, just not (yet) in the user's hands.
    """
    user: User
    channel: OtpChannel
    otp: str
    delivered: bool


def _reset_target(email: Optional[str], phone: Optional[str]) -> tuple[OtpChannel, str]:
    """Exactly one of email / phone selects the OTP channel."""
    email = email.strip() if email else None
    phone = normalize_phone(phone)
    if bool(email) == bool(phone):
        raise ValidationException("Provide either an email or a phone number")
    if email:
        return OtpChannel.EMAIL, normalize_email(email)
    return OtpChannel.PHONE, validate_phone(phone)


# ── Sessions ──────────────────────────────────────────────────────────────────

def issue_session(user_id, clock: Clock = utc_now) -> str:
    return issue_session_token(str(user_id), clock=clock)


def validate_session(db: Session, token: str) -> User:
    """Resolve a session token to its user. A deleted user is treated as bad credentials."""
    user_id = validate_session_token(token)
    try:
        return CredentialStore(db).find_by_id(user_id)
    except NotFoundException:
        raise InvalidCredentialsException()


# ── Signup / Login ────────────────────────────────────────────────────────────

def signup(
    db: Session,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    clock: Clock = utc_now,
) -> AuthResult:
    """
    Creates a local account and returns it with a session token.
    All input validation runs before the store is touched.
    """
    name = validate_name(name)
    email = normalize_email(email)
    validate_password(password)
    phone = normalize_phone(phone)
    if phone:
        validate_phone(phone)

    store = CredentialStore(db, clock=clock)
    user = store.create(
        name=name,
        email=email,
        phone=phone,
        password_hash=hash_password(password),
        auth_mode=AuthMode.LOCAL,
    )
    logger.info(f"User signed up: user={user.id}")
    return AuthResult(user=user, token=issue_session(user.id, clock=clock))


def login(db: Session, email: str, password: str, clock: Clock = utc_now) -> AuthResult:
    """
    Security: always use the same error message regardless of whether
    the email exists or the password is wrong (prevents user enumeration).
    """
    email = normalize_email(email)
    if not password:
        raise ValidationException("Please provide email and password")

    try:
        user = CredentialStore(db, clock=clock).find_by_identity(email=email)
    except NotFoundException:
        user = None

    # Always run verify_password so "wrong email" and "wrong password" take the same time.
    password_ok = verify_password(password, user.password_hash if user else _DUMMY_HASH)

    if user is None:
        logger.warning("Login failed: unknown email")
        raise UnknownAccountException()
    if not password_ok:
        logger.warning(f"Login failed: bad password for user={user.id}")
        raise InvalidCredentialsException()
    return AuthResult(user=user, token=issue_session(user.id, clock=clock))


# ── Federated ─────────────────────────────────────────────────────────────────

def federated_login(db: Session, claims: FederatedClaims, clock: Clock = utc_now) -> FederatedAuthResult:
    user, is_new_user = reconcile_federated_identity(CredentialStore(db, clock=clock), claims)
    return FederatedAuthResult(
        user=user,
        token=issue_session(user.id, clock=clock),
        is_new_user=is_new_user,
    )


# ── Password Reset ────────────────────────────────────────────────────────────

async def request_reset(
    db: Session,
    notifier: Notifier,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    clock: Clock = utc_now,
) -> ResetIssue:
    """
    Issue a reset OTP on the channel the user asked for and try to deliver it.
    Delivery failure is reported, not raised: the OTP is already persisted.
    """
    channel, address = _reset_target(email, phone)
    store = CredentialStore(db, clock=clock)
    if channel == OtpChannel.EMAIL:
        user = store.find_by_identity(email=address)
    else:
        user = store.find_by_identity(phone=address)

    otp = otp_service.issue_otp(store, user, channel, clock=clock)
    delivered = await notifier.deliver(channel, address, otp)
    return ResetIssue(user=user, channel=channel, otp=otp, delivered=delivered)


def confirm_reset(
    db: Session,
    otp: str,
    new_password: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    clock: Clock = utc_now,
) -> User:
    """
    Verify the OTP for the given channel, set the new password, then consume the OTP.
    If the password write fails the OTP stays usable until it expires.
    """
    validate_password(new_password)
    if not otp or not otp.strip():
        raise ValidationException("Please provide the OTP")
    channel, address = _reset_target(email, phone)

    store = CredentialStore(db, clock=clock)
    if channel == OtpChannel.EMAIL:
        user = store.find_by_identity(email=address)
    else:
        user = store.find_by_identity(phone=address)

    otp_service.validate_otp(store, user, channel, otp.strip(), clock=clock)
    apply_password_change(store, user, new_password)
    user = otp_service.clear_otp(store, user)
    logger.info(f"Password reset completed: user={user.id}, channel={channel.value}")
    return user


# ── Profile ───────────────────────────────────────────────────────────────────

def update_profile(
    db: Session,
    user: User,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """
    Only provided fields change. The password is re-hashed only when it differs
    from the current one (see apply_password_change).
    """
    store = CredentialStore(db)
    changes = {}
    if name is not None:
        changes["name"] = validate_name(name)
    if phone is not None:
        normalized = normalize_phone(phone)
        if normalized is None:
            raise ValidationException("Please add a valid phone number")
        changes["phone"] = validate_phone(normalized)
    if password is not None:
        validate_password(password)

    if changes:
        user = store.update(user.id, changes)
    if password is not None:
        apply_password_change(store, user, password)
        db.refresh(user)
    return user
