# models/__init__.py
# Import all models here so that:
# 1. Alembic's env.py can import this single module and detect all tables.
# 2. SQLAlchemy relationship() calls resolve correctly (all classes in same metadata).

from authapp.models.user import User, AuthMode, OtpChannel, OtpState, NoActiveOtp, PendingOtp
from authapp.models.content import Content

__all__ = [
    "User",
    "AuthMode",
    "OtpChannel",
    "OtpState",
    "NoActiveOtp",
    "PendingOtp",
    "Content",
]
