import uuid
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from we_plan_it_api.app.core.config import Settings
from we_plan_it_api.app.core.db import get_connection
from we_plan_it_api.app.main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a fresh SQLite file for each test."""
    return Settings(
        database_url=str(tmp_path / "we_plan_it_test.db"),
        token_secret=TEST_SECRET,
        environment="test",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db(settings):
    """Direct connection to the test database for assertions."""
    conn = get_connection(settings.database_url)
    try:
        yield conn
    finally:
        conn.close()


def _email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


def signup(client, email: str = None, password: str = "secret123", name: str = "Test User"):
    return client.post(
        "/api/auth/signup",
        json={"email": email or _email(), "password": password, "name": name},
    )


def login(client, email: str, password: str = "secret123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def register_and_login(client, name: str = "Test User") -> Dict:
    """Create a user and return ``{"user": ..., "headers": ...}``."""
    email = _email(name.split()[0].lower())
    created = signup(client, email=email, name=name)
    assert created.status_code == 201, created.text
    logged_in = login(client, email)
    assert logged_in.status_code == 200, logged_in.text
    body = logged_in.json()
    return {"user": body["user"], "headers": {"Authorization": f"Bearer {body['authToken']}"}}


@pytest.fixture
def alice(client):
    return register_and_login(client, "Alice Owner")


@pytest.fixture
def bob(client):
    return register_and_login(client, "Bob Guest")


@pytest.fixture
def event(client, alice):
    resp = client.post(
        "/api/events",
        json={"title": "Team offsite", "startDate": "2026-05-01T09:00:00Z", "location": "Lisbon"},
        headers=alice["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
