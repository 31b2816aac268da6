"""
Shared fixtures.

Settings are read from the environment when ``core.config`` is first
imported, so the variables below must be set before any application
import.  Every test gets its own in-memory SQLite database, wired in
through ``app.dependency_overrides[get_db]``.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="tracker-tests-")

os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["CORS_ALLOW_ORIGINS"] = '["http://localhost:5173"]'
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "log", "app.log")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from main import app  # noqa: E402
import models.user  # noqa: F401, E402
import models.component  # noqa: F401, E402

PASSWORD = "pw123456"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def api_db(session_factory):
    """Route the application's get_db dependency to the test database."""

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture()
def client(api_db):
    with TestClient(app) as c:
        yield c


# -- helpers ----------------------------------------------------------------


def signup(client, name="Ann", email="ann@x.com", password=PASSWORD):
    return client.post("/auth/signup", json={"name": name, "email": email, "password": password})


def signin(client, email="ann@x.com", password=PASSWORD):
    return client.post("/auth/signin", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def register_and_signin(client, name="Ann", email="ann@x.com", password=PASSWORD) -> dict:
    """Create an account and return the signin ``data`` (tokens + user)."""
    assert signup(client, name, email, password).status_code == 201
    resp = signin(client, email, password)
    assert resp.status_code == 200
    return resp.json()["data"]


@pytest.fixture()
def ann(client):
    return register_and_signin(client)


@pytest.fixture()
def bob(client):
    return register_and_signin(client, "Bob", "bob@x.com", "hunter22")
