"""
OTP service: generation, hashed storage on the credential record, and verification.

State machine per record (see User.otp_state):

    NoActiveOtp --issue--> PendingOtp --clear / expiry--> NoActiveOtp

Security design decisions:
  1. Raw OTP is NEVER stored, only its bcrypt hash, same primitive as passwords.
  2. Issuing a new OTP overwrites the previous one, so only the latest code is valid.
  3. Each OTP is tagged with the channel it was sent on; it can only be redeemed
     through the same channel (an emailed code cannot reset via phone).
  4. Expiry is enforced lazily: an expired OTP is cleared the next time it is checked.
  5. A successful check does NOT consume the OTP. The caller clears it only after
     the dependent step (the password write) has succeeded.
"""
import logging
import secrets
from datetime import timedelta

from authapp.config import settings
from authapp.core.clock import Clock, utc_now
from authapp.core.exceptions import InvalidOTPException, OTPExpiredException, ValidationException
from authapp.core.security import pwd_context
from authapp.models.user import User, OtpChannel, NoActiveOtp, PendingOtp
from authapp.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def generate_otp(length: int = None) -> str:
    """
    Cryptographically secure numeric code, uniform over the whole range.
    Zero-padded so "004211" is as likely as "904211".
    """
    length = length or settings.otp_length
    return str(secrets.randbelow(10 ** length)).zfill(length)


def issue_otp(store: CredentialStore, user: User, channel: OtpChannel, clock: Clock = utc_now) -> str:
    """
    Start (or restart) a reset window on `user` and return the raw code.
    The caller is responsible for delivering it; it is not kept anywhere.
    """
    raw_otp = generate_otp()
    state = PendingOtp(
        otp_hash=pwd_context.hash(raw_otp),
        expires_at=clock() + timedelta(minutes=settings.otp_expire_minutes),
        channel=OtpChannel(channel),
    )
    store.update(user.id, {"otp_state": state})
    logger.info(f"OTP issued: user={user.id}, channel={state.channel.value}")
    return raw_otp


def validate_otp(
    store: CredentialStore,
    user: User,
    channel: OtpChannel,
    otp: str,
    clock: Clock = utc_now,
) -> None:
    """
    Check a submitted code. Returns None on success, raises otherwise.

    Order of checks:
      - no active OTP                 -> ValidationException
      - issued on another channel     -> ValidationException (OTP stays valid)
      - past expiry                   -> OTP cleared, OTPExpiredException
      - hash mismatch                 -> InvalidOTPException (retry allowed)
    """
    state = user.otp_state
    if not isinstance(state, PendingOtp):
        raise ValidationException("No active OTP. Please request a new one.")

    if state.channel != OtpChannel(channel):
        raise ValidationException(f"This OTP was not issued for {OtpChannel(channel).value} reset")

    if clock() > state.expires_at:
        clear_otp(store, user)
        logger.info(f"OTP expired: user={user.id}")
        raise OTPExpiredException()

    if not pwd_context.verify(otp or "", state.otp_hash):
        logger.warning(f"OTP mismatch: user={user.id}")
        raise InvalidOTPException()


def clear_otp(store: CredentialStore, user: User) -> User:
    """Drop any active OTP and persist. Safe to call when there is none."""
    return store.update(user.id, {"otp_state": NoActiveOtp()})
