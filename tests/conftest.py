"""Test fixtures for the CleanCity API tests."""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cleancity_api import auth
from cleancity_api.database import Base, get_db
from cleancity_api.storage import LocalFileStore, get_file_store

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture(scope="session", autouse=True)
def fast_hashing():
    """bcrypt with minimum rounds keeps the suite quick."""
    original = auth.pwd_context
    auth.pwd_context = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4)
    yield
    auth.pwd_context = original


@pytest.fixture(scope="session")
def db_engine():
    """Create a test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL, pool_pre_ping=True)
    from cleancity_api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="session")
def TestingSessionLocal(db_engine):
    """Shared session factory for the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(autouse=True)
def clean_tables(db_engine):
    """Empty all tables between tests for isolation."""
    yield
    with db_engine.connect() as conn:
        conn.execute(text("DELETE FROM shared_occurrences"))
        conn.execute(text("DELETE FROM photos"))
        conn.execute(text("DELETE FROM occurrences"))
        conn.execute(text("DELETE FROM users"))
        conn.commit()


@pytest.fixture
def db_session(TestingSessionLocal):
    """Create a test database session."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(str(tmp_path / "uploads"))


@pytest.fixture
def notifier():
    """Records fanout calls instead of writing to sockets."""
    mock = MagicMock()
    mock.occurrence_created = AsyncMock()
    mock.occurrence_updated = AsyncMock()
    mock.occurrence_deleted = AsyncMock()
    mock.photo_uploaded = AsyncMock()
    mock.share_created = AsyncMock()
    return mock


@pytest.fixture
def app(TestingSessionLocal, file_store, notifier):
    """FastAPI app with the database, file store and notifier overridden."""
    from cleancity_api.events import get_notifier
    from cleancity_api.main import app as fastapi_app

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_file_store] = lambda: file_store
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Create a test HTTP client."""
    return TestClient(app)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, email: str, password: str = "secret123", full_name: str = "Test User"):
    """Sign a user up through the API and return (user_id, token)."""
    resp = client.post(
        "/api/auth/signup",
        json={"fullName": full_name, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return data["user"]["id"], data["token"]


def create_occurrence(client, token: str, **overrides) -> dict:
    body = {
        "title": "Illegal dumping",
        "description": "Bags of rubbish left by the river",
        "latitude": 38.7223,
        "longitude": -9.1393,
    }
    body.update(overrides)
    resp = client.post("/api/occurrences", json=body, headers=auth_headers(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def alice(client):
    return signup(client, "alice@example.com", full_name="Alice")


@pytest.fixture
def bob(client):
    return signup(client, "bob@example.com", full_name="Bob")
