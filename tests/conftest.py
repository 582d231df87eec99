# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

from activity_sessions.main import app
from activity_sessions.api import deps
from activity_sessions.api.v1.endpoints import activities, sessions
from activity_sessions.core.kafka_producer import get_kafka_producer
from activity_sessions.core.limiter import limiter
from activity_sessions.db.base_class import Base
from activity_sessions.db.session import enable_sqlite_foreign_keys
from activity_sessions.schemas.token import TokenPayload
from activity_sessions.services.notification_trigger import NotificationTrigger
import activity_sessions.models  # noqa: F401

# Rate limits are exercised by slowapi itself, not by these tests.
limiter.enabled = False


# --- Database Setup ---
@pytest.fixture(scope="function")
def db_session():
    """A fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def notifier():
    """Notification trigger double; records calls without writing outbox rows."""
    return MagicMock(spec=NotificationTrigger)


# --- Mock Dependencies Setup ---
class CurrentUser:
    """Mutable holder so a test can switch the authenticated user mid-test."""

    def __init__(self, sub="user_test"):
        self.sub = sub

    def token(self) -> TokenPayload:
        return TokenPayload(sub=self.sub, exp=9999999999)


@pytest.fixture
def current_user():
    return CurrentUser()


def override_get_kafka_producer():
    """Provides a mock Kafka producer that does nothing."""
    yield MagicMock()


def _install_overrides(current_user):
    app.dependency_overrides[deps.get_current_user] = current_user.token
    app.dependency_overrides[deps.get_current_user_optional] = current_user.token
    app.dependency_overrides[get_kafka_producer] = override_get_kafka_producer


@pytest.fixture
def dispatch_task(monkeypatch):
    """Replaces the post-request outbox dispatch, which would open the real database."""
    task = MagicMock()
    monkeypatch.setattr(activities, "dispatch_notifications_task", task)
    monkeypatch.setattr(sessions, "dispatch_notifications_task", task)
    return task


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client(current_user, dispatch_task):
    """
    TestClient with a MagicMock database, for endpoint tests that mock the
    service layer.
    """
    app.dependency_overrides[deps.get_db] = lambda: MagicMock()
    _install_overrides(current_user)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(db_session, current_user, dispatch_task):
    """TestClient backed by the in-memory database, for end-to-end API tests."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    _install_overrides(current_user)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
