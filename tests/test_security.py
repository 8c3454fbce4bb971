import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from authapp.config import settings
from authapp.core.exceptions import SessionTokenError, SessionTokenException
from authapp.core.security import hash_password, issue_session_token, validate_session_token, verify_password


def test_hash_is_salted_and_verifies():
    first = hash_password("secret1")
    second = hash_password("secret1")
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)


def test_verify_rejects_other_password():
    assert not verify_password("secret2", hash_password("secret1"))


@pytest.mark.parametrize("bad_hash", [None, "", "not-a-bcrypt-hash"])
def test_verify_never_matches_missing_or_garbage_hash(bad_hash):
    assert verify_password("secret1", bad_hash) is False


def test_session_token_round_trip():
    user_id = str(uuid.uuid4())
    assert validate_session_token(issue_session_token(user_id)) == user_id


def test_session_token_valid_for_thirty_days():
    issued_at = datetime.now(timezone.utc) - timedelta(days=29)
    user_id = str(uuid.uuid4())
    token = issue_session_token(user_id, clock=lambda: issued_at)
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    assert payload["exp"] - payload["iat"] == 30 * 24 * 3600
    assert validate_session_token(token) == user_id


def test_expired_session_token():
    issued_at = datetime.now(timezone.utc) - timedelta(days=31)
    token = issue_session_token(str(uuid.uuid4()), clock=lambda: issued_at)
    with pytest.raises(SessionTokenException) as exc:
        validate_session_token(token)
    assert exc.value.reason == SessionTokenError.EXPIRED
    assert exc.value.status_code == 401


def test_session_token_signed_with_other_secret():
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": "someone", "type": "access", "iat": now, "exp": now + timedelta(days=1)},
        "a-different-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )
    with pytest.raises(SessionTokenException) as exc:
        validate_session_token(forged)
    assert exc.value.reason == SessionTokenError.BAD_SIGNATURE


@pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
def test_malformed_session_token(token):
    with pytest.raises(SessionTokenException) as exc:
        validate_session_token(token)
    assert exc.value.reason == SessionTokenError.MALFORMED


def test_token_without_access_type_is_malformed():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "someone", "type": "refresh", "iat": now, "exp": now + timedelta(days=1)},
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    with pytest.raises(SessionTokenException) as exc:
        validate_session_token(token)
    assert exc.value.reason == SessionTokenError.MALFORMED
