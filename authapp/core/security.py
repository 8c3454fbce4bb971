"""
Security utilities: password/OTP hashing and session token management.
Uses PyJWT (not python-jose) and passlib's bcrypt handler.
"""
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidSignatureError, InvalidTokenError
from passlib.context import CryptContext
from datetime import timedelta

from authapp.config import settings
from authapp.core.clock import Clock, utc_now
from authapp.core.exceptions import SessionTokenError, SessionTokenException

# ── Hashing ───────────────────────────────────────────────────────────────────
# One context for passwords and OTP codes. The work factor is fixed by settings
# so every hash in the table costs the same to verify.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check. Empty or unrecognised hashes never match."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


# ── Session Tokens ────────────────────────────────────────────────────────────

def issue_session_token(user_id: str, clock: Clock = utc_now) -> str:
    """
    Long-lived (30 day) signed token bound to a credential id.
    There is no revocation list: expiry is the only way a token stops working.
    """
    issued_at = clock()
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.session_token_expire_days),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def validate_session_token(token: str) -> str:
    """
    Decode a session token and return its subject (the user id).

    Raises SessionTokenException with reason EXPIRED, BAD_SIGNATURE or MALFORMED.
    InvalidSignatureError subclasses DecodeError, so it has to be caught first.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise SessionTokenException(SessionTokenError.EXPIRED)
    except InvalidSignatureError:
        raise SessionTokenException(SessionTokenError.BAD_SIGNATURE)
    except InvalidTokenError:
        raise SessionTokenException(SessionTokenError.MALFORMED)

    subject = payload.get("sub")
    if payload.get("type") != "access" or not subject:
        raise SessionTokenException(SessionTokenError.MALFORMED)
    return subject
