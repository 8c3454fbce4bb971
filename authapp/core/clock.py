"""
Wall-clock source used for every expiry computation (OTP windows, session tokens,
created_at stamps). Services take a `clock` argument defaulting to `utc_now`, and
the app keeps the active clock on `app.state.clock` so tests can swap in a frozen one.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    SQLite drops tzinfo on TIMESTAMP(timezone=True) columns, Postgres keeps it.
    Treat naive values read back from the DB as UTC so comparisons never mix the two.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
