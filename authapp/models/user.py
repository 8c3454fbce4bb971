import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import CheckConstraint, Column, String, TIMESTAMP, Uuid, Enum as SAEnum
from sqlalchemy.orm import relationship

from authapp.core.clock import as_utc
from authapp.database import Base


class AuthMode(str, enum.Enum):
    LOCAL = "local"
    FEDERATED = "federated"


class OtpChannel(str, enum.Enum):
    EMAIL = "email"
    PHONE = "phone"


# ── OTP state ─────────────────────────────────────────────────────────────────
# The three otp_* columns are only ever written together through User.otp_state.

@dataclass(frozen=True)
class NoActiveOtp:
    pass


@dataclass(frozen=True)
class PendingOtp:
    otp_hash: str
    expires_at: datetime
    channel: OtpChannel


OtpState = Union[NoActiveOtp, PendingOtp]


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    """
    One credential record per end-user identity.

    Constraints mirrored at table level:
      - at least one of email / phone
      - local accounts always carry a password hash
      - OTP columns are all set (reset in progress) or all null
    email, phone and federated_id are unique when present (NULLs don't collide).
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="ck_users_email_or_phone"),
        CheckConstraint(
            "auth_mode <> 'local' OR password_hash IS NOT NULL",
            name="ck_users_local_has_password",
        ),
        CheckConstraint(
            "(otp_hash IS NULL AND otp_expires_at IS NULL AND otp_channel IS NULL) OR "
            "(otp_hash IS NOT NULL AND otp_expires_at IS NOT NULL AND otp_channel IS NOT NULL)",
            name="ck_users_otp_all_or_nothing",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), unique=True, nullable=True, index=True)
    password_hash = Column(String, nullable=True)
    federated_id = Column(String(255), unique=True, nullable=True, index=True)
    auth_mode = Column(
        SAEnum(AuthMode, name="auth_mode", values_callable=_enum_values),
        nullable=False,
        default=AuthMode.LOCAL,
    )
    avatar_url = Column(String(500), nullable=True)

    # Password-reset OTP. Never touch these directly, use otp_state.
    _otp_hash = Column("otp_hash", String, nullable=True)
    _otp_expires_at = Column("otp_expires_at", TIMESTAMP(timezone=True), nullable=True)
    _otp_channel = Column(
        "otp_channel",
        SAEnum(OtpChannel, name="otp_channel", values_callable=_enum_values),
        nullable=True,
    )

    created_at = Column(TIMESTAMP(timezone=True), nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────
    contents = relationship("Content", back_populates="user", cascade="all, delete-orphan")

    @property
    def otp_state(self) -> OtpState:
        if self._otp_hash is None:
            return NoActiveOtp()
        return PendingOtp(
            otp_hash=self._otp_hash,
            expires_at=as_utc(self._otp_expires_at),
            channel=OtpChannel(self._otp_channel),
        )

    @otp_state.setter
    def otp_state(self, state: OtpState) -> None:
        if isinstance(state, PendingOtp):
            self._otp_hash = state.otp_hash
            self._otp_expires_at = state.expires_at
            self._otp_channel = state.channel
        elif isinstance(state, NoActiveOtp):
            self._otp_hash = None
            self._otp_expires_at = None
            self._otp_channel = None
        else:
            raise TypeError(f"Unsupported OTP state: {state!r}")
