"""
Pytest configuration and fixtures.

Settings are read at import time, so the environment is seeded before anything from
authapp is imported. Every test gets a fresh in-memory SQLite schema; StaticPool keeps
the single connection alive so the app (running endpoints in worker threads) and the
test see the same database.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789abcdef")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEFAULT_COUNTRY_CODE", "+91")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authapp.core.exceptions import ContentGenerationError, DeliveryError, FederatedTokenException
from authapp.database import Base, get_db
import authapp.models  # noqa: F401 registers all tables on Base.metadata
from authapp.main import create_app
from authapp.services.credential_store import CredentialStore
from authapp.services.notifier import Notifier

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FrozenClock:
    """
    Controllable clock. Starts an hour in the past so tokens minted after a few
    advance() calls still carry an `iat` that PyJWT accepts.
    """

    def __init__(self, start: datetime = None):
        self.now = start or datetime.now(timezone.utc) - timedelta(hours=1)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, address: str, otp: str) -> None:
        if self.fail:
            raise DeliveryError("provider unavailable")
        self.sent.append((address, otp))

    @property
    def last_otp(self) -> str:
        return self.sent[-1][1]


class FakeTokenVerifier:
    """Maps fake ID tokens to the claims they should yield."""

    def __init__(self):
        self.tokens = {}

    def verify(self, token: str):
        if token not in self.tokens:
            raise FederatedTokenException("Invalid Google ID token")
        return self.tokens[token]


class FakeContentGenerator:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.queries = []

    async def generate(self, query: str) -> str:
        if self.fail:
            raise ContentGenerationError("quota exceeded")
        self.queries.append(query)
        return f"Generated answer for: {query}"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def store(db, clock):
    return CredentialStore(db, clock=clock)


@pytest.fixture
def email_sender():
    return RecordingSender()


@pytest.fixture
def sms_sender():
    return RecordingSender()


@pytest.fixture
def notifier(email_sender, sms_sender):
    return Notifier(email_sender=email_sender, sms_sender=sms_sender)


@pytest.fixture
def oauth_verifier():
    return FakeTokenVerifier()


@pytest.fixture
def content_generator():
    return FakeContentGenerator()


@pytest.fixture
def client(db, clock, notifier, oauth_verifier, content_generator):
    app = create_app(
        notifier=notifier,
        oauth_verifier=oauth_verifier,
        content_generator=content_generator,
        clock=clock,
    )

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
