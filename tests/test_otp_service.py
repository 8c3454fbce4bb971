from datetime import timedelta

import pytest

from authapp.core.exceptions import InvalidOTPException, OTPExpiredException, ValidationException
from authapp.core.security import hash_password
from authapp.models.user import NoActiveOtp, OtpChannel, PendingOtp
from authapp.services import otp_service


@pytest.fixture
def user(store):
    return store.create(name="Ann", email="ann@x.com", phone="9876543210", password_hash=hash_password("secret1"))


def test_generate_otp_is_six_digits():
    for _ in range(50):
        otp = otp_service.generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


def test_generate_otp_keeps_leading_zeros(monkeypatch):
    monkeypatch.setattr(otp_service.secrets, "randbelow", lambda upper: 42)
    assert otp_service.generate_otp() == "000042"


def test_issue_stores_hash_expiry_and_channel(store, user, clock):
    otp = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)

    state = user.otp_state
    assert isinstance(state, PendingOtp)
    assert state.channel == OtpChannel.EMAIL
    assert state.otp_hash != otp
    assert state.expires_at == clock.now + timedelta(minutes=10)


def test_issue_validate_clear_is_single_use(store, user, clock):
    otp = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)

    otp_service.validate_otp(store, user, OtpChannel.EMAIL, otp, clock=clock)
    otp_service.clear_otp(store, user)

    assert user.otp_state == NoActiveOtp()
    with pytest.raises(ValidationException):
        otp_service.validate_otp(store, user, OtpChannel.EMAIL, otp, clock=clock)


def test_validate_without_active_otp(store, user, clock):
    with pytest.raises(ValidationException):
        otp_service.validate_otp(store, user, OtpChannel.EMAIL, "123456", clock=clock)


def test_expired_otp_is_cleared(store, user, clock, db):
    otp = otp_service.issue_otp(store, user, OtpChannel.PHONE, clock=clock)
    clock.advance(minutes=10, seconds=1)

    with pytest.raises(OTPExpiredException):
        otp_service.validate_otp(store, user, OtpChannel.PHONE, otp, clock=clock)

    db.expire_all()
    reloaded = store.find_by_id(user.id)
    assert reloaded.otp_state == NoActiveOtp()
    assert reloaded._otp_hash is None
    assert reloaded._otp_expires_at is None
    assert reloaded._otp_channel is None


def test_otp_still_valid_at_expiry_instant(store, user, clock):
    otp = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)
    clock.advance(minutes=10)
    otp_service.validate_otp(store, user, OtpChannel.EMAIL, otp, clock=clock)


def test_wrong_channel_keeps_otp(store, user, clock):
    otp = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)

    with pytest.raises(ValidationException):
        otp_service.validate_otp(store, user, OtpChannel.PHONE, otp, clock=clock)

    assert isinstance(user.otp_state, PendingOtp)
    otp_service.validate_otp(store, user, OtpChannel.EMAIL, otp, clock=clock)


def test_wrong_code_keeps_otp_for_retry(store, user, clock):
    otp = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)
    wrong = "000000" if otp != "000000" else "111111"

    with pytest.raises(InvalidOTPException):
        otp_service.validate_otp(store, user, OtpChannel.EMAIL, wrong, clock=clock)

    assert isinstance(user.otp_state, PendingOtp)
    otp_service.validate_otp(store, user, OtpChannel.EMAIL, otp, clock=clock)


def test_reissue_replaces_previous_code(store, user, clock, monkeypatch):
    codes = iter([111111, 222222])
    monkeypatch.setattr(otp_service.secrets, "randbelow", lambda upper: next(codes))

    first = otp_service.issue_otp(store, user, OtpChannel.EMAIL, clock=clock)
    second = otp_service.issue_otp(store, user, OtpChannel.PHONE, clock=clock)

    with pytest.raises(ValidationException):
        otp_service.validate_otp(store, user, OtpChannel.EMAIL, first, clock=clock)
    with pytest.raises(InvalidOTPException):
        otp_service.validate_otp(store, user, OtpChannel.PHONE, first, clock=clock)
    otp_service.validate_otp(store, user, OtpChannel.PHONE, second, clock=clock)


def test_clear_is_idempotent(store, user):
    otp_service.clear_otp(store, user)
    otp_service.clear_otp(store, user)
    assert user.otp_state == NoActiveOtp()


def test_otp_state_rejects_unknown_values(user):
    with pytest.raises(TypeError):
        user.otp_state = "pending"
