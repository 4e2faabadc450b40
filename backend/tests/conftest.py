"""Pytest fixtures: SQLite database per test, app dependency overridden."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("DB_CONNECT_RETRIES", "1")

from datetime import datetime, timezone, timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.main import app

# Import all models so they register with Base.metadata
from app.models.user import User, UserRole              # noqa: F401
from app.models.event import Event, EventCategory, EventStatus
from app.models.favorite import Favorite                # noqa: F401
from app.models.notification import Notification        # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

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
    """Yield a database session for direct service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


def register_user(client: TestClient, name: str = "Test User", email: str = None,
                  password: str = "secret123", college: str = "IIT Delhi") -> dict:
    """Helper: POST /api/auth/register; returns the user dict plus its token."""
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    resp = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "college": college,
    })
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {**body["data"], "token": body["token"]}


def register_admin(client: TestClient, session_factory, name: str = "Admin User") -> dict:
    """Helper: register a user and flip its role to admin directly in the DB."""
    user = register_user(client, name=name)
    session = session_factory()
    try:
        row = session.query(User).filter(User.user_id == user["user_id"]).first()
        row.role = UserRole.admin
        session.commit()
    finally:
        session.close()
    user["role"] = "admin"
    return user


def event_payload(title: str = "HackIndia", days_ahead: int = 7, **overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    payload = {
        "title": title,
        "description": f"{title}, build something in 36 hours",
        "category": "hackathon",
        "event_type": "offline",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=1)).isoformat(),
        "venue": "Main Auditorium",
        "city": "New Delhi",
        "college": "IIT Delhi",
        "tags": ["ai", "web"],
        "requirements": ["laptop"],
    }
    payload.update(overrides)
    return payload


def create_event(client: TestClient, user: dict, **overrides) -> dict:
    """Helper: POST /api/events as ``user`` and return the event dict."""
    resp = client.post("/api/events/", json=event_payload(**overrides), headers=auth_headers(user))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def approve(client: TestClient, admin: dict, event_id: str) -> dict:
    resp = client.put(f"/api/events/{event_id}/status", json={"status": "approved"},
                      headers=auth_headers(admin))
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def seed_user(session, name: str = "Organizer", role: UserRole = UserRole.user) -> User:
    """Insert a user row directly (no password flow needed)."""
    user = User(name=name, email=f"{name.lower().replace(' ', '.')}@example.com",
                password_hash="not-a-real-hash", role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def seed_event(session, organizer: User, title: str = "Seeded Event", days_ahead: int = 5, **fields) -> Event:
    """Insert an event row directly; approved unless ``status`` is given."""
    values = {
        "description": f"About {title}",
        "category": EventCategory.hackathon,
        "start_date": datetime.now(timezone.utc) + timedelta(days=days_ahead),
        "city": "Pune",
        "college": "COEP Technological University",
        "status": EventStatus.approved,
    }
    values.update(fields)
    ev = Event(title=title, organizer_id=organizer.user_id, **values)
    session.add(ev)
    session.commit()
    session.refresh(ev)
    return ev
