"""Shared fixtures: an isolated in-memory store and a test client per test."""

import os

# The module-level app in main.py reads settings on import
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from services.database import BlogDB
from services.passwords import hash_password
from services.session import SessionCodec

SECRET = "test-secret"


@pytest.fixture
def settings():
    return Settings(
        session_secret=SECRET,
        database_url="sqlite://",
        log_level="WARNING",
        log_format="text",
    )


@pytest.fixture
def db():
    store = BlogDB.from_url("sqlite://")
    store.create_tables()
    yield store
    store.close()


@pytest.fixture
def codec():
    return SessionCodec(SECRET)


@pytest.fixture
def client(settings, db):
    app = create_app(settings, db)
    # https so the Secure session cookie is sent back
    with TestClient(app, base_url="https://testserver", follow_redirects=False) as c:
        yield c


@pytest.fixture
def make_user(db):
    """Insert a user directly, bypassing the routes."""
    def _make_user(username: str, password: str = "secret1"):
        return db.create_user(username, hash_password(password))
    return _make_user


@pytest.fixture
def login(client):
    """Log the test client in as the given user; replaces any current session."""
    def _login(username: str, password: str = "secret1"):
        res = client.post("/login", data={"username": username, "password": password})
        assert res.status_code == 302
        return res
    return _login
