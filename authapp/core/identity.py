"""
Identity normalisation and input validation.

Everything here is pure: no DB, no network. The credential store relies on these
canonical forms for its uniqueness checks, so every write path goes through them.
"""
import re
from typing import Optional

from email_validator import validate_email, EmailNotValidError

from authapp.config import settings
from authapp.core.exceptions import ValidationException

NAME_MAX_LENGTH = 50
_PHONE_RE = re.compile(r"^\+\d{7,15}$")


def normalize_phone(raw: Optional[str], country_code: Optional[str] = None) -> Optional[str]:
    """
    Canonicalise a phone number to `+<country code><digits>`.

    A leading "+" means the number already carries its country code and is left
    alone. Otherwise leading zeros (trunk prefix) are dropped and the configured
    default country code is prepended. Empty input yields None.
    """
    if raw is None:
        return None
    phone = raw.strip()
    if not phone:
        return None
    if phone.startswith("+"):
        return phone
    return (country_code or settings.default_country_code) + phone.lstrip("0")


def validate_phone(phone: str) -> str:
    if not _PHONE_RE.match(phone):
        raise ValidationException("Please add a valid phone number")
    return phone


def normalize_email(raw: Optional[str]) -> str:
    """Trim, lower-case and format-check an email address (no DNS lookups)."""
    if raw is None or not raw.strip():
        raise ValidationException("Please add an email")
    try:
        validate_email(raw.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValidationException("Please add a valid email")
    return raw.strip().lower()


def validate_name(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationException("Please add a name")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationException(f"Name cannot be more than {NAME_MAX_LENGTH} characters")
    return name
