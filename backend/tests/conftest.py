"""Pytest fixtures — a fresh SQLite database per test."""
import os

# Keep module-level engine creation away from the dev database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from hangouts.database import Base, get_db
from hangouts.main import app
from hangouts.schemas.hangout import HangoutCreate
from hangouts.services import hangout_service
from hangouts.services.notifications import NotificationDispatcher, get_dispatcher

# Import all models so they register with Base.metadata
from hangouts.models.user import User                  # noqa: F401
from hangouts.models.hangout import Hangout            # noqa: F401
from hangouts.models.participant import Participant    # noqa: F401
from hangouts.models.poll import Poll                  # noqa: F401
from hangouts.models.vote import Vote                  # noqa: F401
from hangouts.models.rsvp import RSVP                  # noqa: F401
from hangouts.models.notification import Notification  # noqa: F401


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database and notification dispatcher bound to SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher(session_factory)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class RecordingNotifier:
    """Stands in for the dispatcher in service-level tests."""

    def __init__(self):
        self.sent = []

    def notify(self, event_type, recipient_ids, payload=None):
        self.sent.append((event_type, list(recipient_ids), payload or {}))


@pytest.fixture()
def notifier():
    return RecordingNotifier()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def make_user(db, username: str) -> User:
    user = User(username=username, display_name=username.title())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_poll_hangout(db, creator, invitees=(), n_options=3, threshold=70, min_participants=2, notifier=None):
    """Create a multi-option hangout with options opt1..optN and return (hangout, poll)."""
    payload = HangoutCreate(
        title="Friday plans",
        participants=[u.user_id for u in invitees],
        consensus_percentage=threshold,
        min_participants=min_participants,
        options=[{"option_id": f"opt{i}", "title": f"Option {i}"} for i in range(1, n_options + 1)],
    )
    hangout = hangout_service.create_hangout(db, creator.user_id, payload, notifier=notifier)
    poll = db.query(Poll).filter(Poll.hangout_id == hangout.hangout_id).one()
    return hangout, poll


def create_test_user(client: TestClient, username: str = "tester") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={"username": username, "display_name": username.title()})
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth(user: dict) -> dict:
    return {"X-User-Id": user["user_id"]}
