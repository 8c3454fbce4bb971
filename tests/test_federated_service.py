import pytest

from authapp.core.exceptions import ValidationException
from authapp.core.security import hash_password, verify_password
from authapp.models.user import AuthMode
from authapp.services.federated_service import FederatedClaims, reconcile_federated_identity


def test_first_login_creates_federated_record(store):
    user, is_new = reconcile_federated_identity(
        store,
        FederatedClaims(email="Bob@X.com", federated_id="g-123", name="Bob",
                        phone="9876543210", avatar_url="https://img/bob.png"),
    )
    assert is_new is True
    assert user.auth_mode == AuthMode.FEDERATED
    assert user.email == "bob@x.com"
    assert user.federated_id == "g-123"
    assert user.phone == "+919876543210"
    assert user.avatar_url == "https://img/bob.png"
    # placeholder password exists but is not anything a caller could know
    assert user.password_hash
    assert not verify_password("", user.password_hash)


def test_returning_login_never_rebinds_federated_id(store):
    first, _ = reconcile_federated_identity(store, FederatedClaims(email="bob@x.com", federated_id="g-123"))
    again, is_new = reconcile_federated_identity(store, FederatedClaims(email="bob@x.com", federated_id="g-456"))

    assert is_new is False
    assert again.id == first.id
    assert again.federated_id == "g-123"


def test_links_existing_local_account_without_overwriting(store):
    local = store.create(name="Ann", email="ann@x.com", phone="9123456789",
                         password_hash=hash_password("secret1"))

    user, is_new = reconcile_federated_identity(
        store,
        FederatedClaims(email="ann@x.com", federated_id="g-ann", name="Google Ann",
                        phone="9876543210", avatar_url="https://img/ann.png"),
    )

    assert is_new is False
    assert user.id == local.id
    assert user.federated_id == "g-ann"
    assert user.name == "Ann"
    assert user.phone == "+919123456789"
    assert user.avatar_url == "https://img/ann.png"
    assert user.auth_mode == AuthMode.LOCAL
    assert verify_password("secret1", user.password_hash)


def test_fills_missing_phone_on_existing_account(store):
    store.create(name="Ann", email="ann@x.com", password_hash=hash_password("secret1"))
    user, _ = reconcile_federated_identity(
        store, FederatedClaims(email="ann@x.com", federated_id="g-ann", phone="09876543210")
    )
    assert user.phone == "+919876543210"


def test_name_falls_back_to_email_local_part(store):
    user, _ = reconcile_federated_identity(store, FederatedClaims(email="carol.w@x.com", federated_id="g-c"))
    assert user.name == "carol.w"


def test_email_is_required(store):
    with pytest.raises(ValidationException):
        reconcile_federated_identity(store, FederatedClaims(email="", federated_id="g-x"))


def test_phone_held_by_another_account_is_not_linked(store):
    store.create(name="Bob", email="bob@x.com", phone="9876543210", password_hash=hash_password("secret1"))
    ann = store.create(name="Ann", email="ann@x.com", password_hash=hash_password("secret1"))

    user, is_new = reconcile_federated_identity(
        store, FederatedClaims(email="ann@x.com", federated_id="g-ann", phone="+919876543210")
    )

    assert is_new is False
    assert user.id == ann.id
    assert user.federated_id == "g-ann"
    assert user.phone is None


def test_new_account_skips_phone_held_by_another_account(store):
    bob = store.create(name="Bob", email="bob@x.com", phone="9876543210", password_hash=hash_password("secret1"))

    user, is_new = reconcile_federated_identity(
        store, FederatedClaims(email="carol@x.com", federated_id="g-c", phone="9876543210")
    )

    assert is_new is True
    assert user.phone is None
    assert store.find_by_identity(phone="9876543210").id == bob.id
