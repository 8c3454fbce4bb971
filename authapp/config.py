import re
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

_COUNTRY_CODE_RE = re.compile(r"^\+\d{1,4}$")


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────
    database_hostname: str = "localhost"
    database_port: str = "5432"
    database_password: str = ""
    database_name: str = "authapp"
    database_username: str = "postgres"
    # Full SQLAlchemy URL; wins over the individual parts above when set
    database_url_override: Optional[str] = None

    # ── Session tokens ────────────────────────────────────────
    secret_key: str
    algorithm: str = "HS256"
    session_token_expire_days: int = 30

    # ── Passwords & OTP ───────────────────────────────────────
    bcrypt_rounds: int = 10
    otp_expire_minutes: int = 10
    otp_length: int = 6
    # Echo the plaintext OTP in the forgot-password response. Debug builds only.
    expose_otp_in_response: bool = False

    # ── Identity ──────────────────────────────────────────────
    default_country_code: str = "+91"

    # ── SMTP ──────────────────────────────────────────────────
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = "no-reply@example.com"
    mail_from_name: str = "Mobile Auth"
    mail_server: str = "smtp.gmail.com"
    mail_port: int = 587

    # ── Twilio (SMS) ──────────────────────────────────────────
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None

    # ── Google OAuth ──────────────────────────────────────────
    google_client_id: Optional[str] = None

    # ── Gemini ────────────────────────────────────────────────
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash-lite"

    # ── App ───────────────────────────────────────────────────
    cors_origins: str = "*"
    log_level: str = "INFO"

    @field_validator("default_country_code")
    @classmethod
    def country_code_has_plus(cls, v: str) -> str:
        # normalize_phone only leaves numbers starting with "+" alone
        v = v.strip()
        if not _COUNTRY_CODE_RE.match(v):
            raise ValueError("DEFAULT_COUNTRY_CODE must look like +91")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Split comma-separated origins into a list, stripping whitespace."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.database_username}:{self.database_password}"
            f"@{self.database_hostname}:{self.database_port}/{self.database_name}"
        )

    @property
    def sms_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_from_number)

    class Config:
        env_file = ".env"
        # Case-insensitive so SECRET_KEY and secret_key both work
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings loader: reads .env once and reuses.
    Use this everywhere instead of instantiating Settings() directly.
    """
    return Settings()


# Module-level singleton for convenience imports
settings = get_settings()
