"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.database import enable_sqlite_pragmas, get_session
from app.core.errors import Unauthenticated
from app.core.security import VerifiedPrincipal, get_identity_verifier
from app.events.store import EventStore
from app.main import app
from app.models import Event

VALID_TOKEN = "valid-token"
OTHER_TOKEN = "other-token"


class FakeIdentityVerifier:
    """Accepts a fixed set of tokens and records every verification attempt."""

    def __init__(self):
        self.principals = {
            VALID_TOKEN: VerifiedPrincipal(email="alice@example.com", subject="1"),
            OTHER_TOKEN: VerifiedPrincipal(email="bob@example.com", subject="2"),
        }
        self.calls: list[str] = []

    def verify(self, token: str) -> VerifiedPrincipal:
        self.calls.append(token)
        if token not in self.principals:
            raise Unauthenticated("Invalid or expired credential")
        return self.principals[token]


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_pragmas(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> EventStore:
    return EventStore(session)


@pytest.fixture(name="verifier")
def verifier_fixture() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture(name="client")
def client_fixture(session: Session, verifier: FakeIdentityVerifier):
    """Create a test client with the test database session and fake verifier."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture(name="other_auth_headers")
def other_auth_headers_fixture() -> dict[str, str]:
    """Credential for a second principal."""
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}


@pytest.fixture(name="sample_event")
def sample_event_fixture(session: Session, store: EventStore) -> Event:
    """Create an upcoming event with no attendees."""
    event_id = store.insert(
        {
            "title": "Summer Picnic",
            "eventType": "Picnic",
            "status": "upcoming",
            "attendees": [],
            "location": "Riverside Park",
        }
    )
    return session.get(Event, event_id)
