"""
Pytest configuration for testing
"""

import os
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set up environment variables for testing before any imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FIREBASE_PROJECT_ID"] = "test-project"
os.environ["FIREBASE_CREDENTIALS_PATH"] = "/tmp/test-creds.json"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ["MAIL_API_URL"] = "https://mail.test/v1/send"
os.environ["MAIL_API_KEY"] = "test-mail-key"
os.environ["SWEEP_SCHEDULER_ENABLED"] = "false"

from subgate.core.exceptions import DeliveryFailure, NotFoundIdentity  # noqa: E402
from subgate.services.identity_service import Identity  # noqa: E402


class RecordingGateway:
    """Notification gateway that records messages instead of sending them"""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, email: str, subject: str, body: str) -> None:
        if email in self.fail_for:
            raise DeliveryFailure(f"Simulated delivery failure for {email}")
        self.sent.append({"email": email, "subject": subject, "body": body})

    def subjects(self) -> list:
        return [message["subject"] for message in self.sent]


class FakeIdentityLookup:
    """Identity lookup backed by a dict of user_id -> Identity"""

    def __init__(self, users=None):
        self.users = users or {}

    def add(self, user_id: str, display_name: str, email: str):
        self.users[user_id] = Identity(display_name=display_name, email=email)

    def resolve(self, user_id: str) -> Identity:
        if user_id not in self.users:
            raise NotFoundIdentity(user_id)
        return self.users[user_id]


# Mock Firebase Admin so init_firebase never reads real credentials
@pytest.fixture(autouse=True)
def mock_firebase_admin(monkeypatch):
    """Mock Firebase Admin SDK to avoid initialization issues in tests"""
    mock_credentials = MagicMock()
    monkeypatch.setattr("firebase_admin.credentials.Certificate", mock_credentials.Certificate)

    mock_init = MagicMock()
    monkeypatch.setattr("firebase_admin.initialize_app", mock_init)

    yield mock_init


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine shared by every session of one test"""
    from subgate.core.database import Base
    import subgate.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test"""
    TestingSessionLocal = sessionmaker(autoflush=False, bind=db_engine)
    session = TestingSessionLocal()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def identity_lookup():
    lookup = FakeIdentityLookup()
    lookup.add("user_1", "Alice", "alice@example.com")
    lookup.add("user_2", "Bob", "bob@example.com")
    return lookup


@pytest.fixture
def store(db_session):
    from subgate.services.subscription_store import SubscriptionStore
    return SubscriptionStore(db_session)


@pytest.fixture
def subscription_service(store, gateway, identity_lookup):
    from subgate.services.subscription_service import SubscriptionService
    return SubscriptionService(store, gateway, identity_lookup)
