import os

import pytest

from we_plan_it_api.app.core.config import Settings
from we_plan_it_api.app.core.db import get_connection
from we_plan_it_api.app.core.security import decode_access_token, verify_password
from we_plan_it_api.cli import main

from .conftest import TEST_SECRET, signup


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    monkeypatch.setenv("TOKEN_SECRET", TEST_SECRET)
    monkeypatch.delenv("DATABASE_URL", raising=False)


def test_migrate_creates_database(tmp_path, capsys):
    db_path = tmp_path / "fresh.db"

    assert main(["--db", str(db_path), "migrate"]) == 0

    assert os.path.exists(db_path)
    assert "Database ready" in capsys.readouterr().out
    conn = get_connection(str(db_path))
    try:
        versions = [row["version"] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
    finally:
        conn.close()
    assert versions == [1, 2]


def test_migrate_is_idempotent(tmp_path):
    db_path = str(tmp_path / "fresh.db")

    assert main(["--db", db_path, "migrate"]) == 0
    assert main(["--db", db_path, "migrate"]) == 0


def test_missing_database_url(capsys):
    assert main(["migrate"]) == 1
    assert "DATABASE_URL" in capsys.readouterr().err


def test_commands_refuse_missing_database(tmp_path, capsys):
    assert main(["--db", str(tmp_path / "absent.db"), "create-token", "--email", "a@example.com"]) == 1
    assert "DB not found" in capsys.readouterr().err


def test_create_token_for_existing_user(client, settings, capsys):
    signup(client, email="admin@example.com")

    assert main(["--db", settings.database_url, "create-token", "--email", "admin@example.com", "--days", "30"]) == 0

    token = capsys.readouterr().out.strip()
    payload = decode_access_token(Settings(database_url=settings.database_url, token_secret=TEST_SECRET), token)
    assert payload.email == "admin@example.com"


def test_create_token_unknown_user(client, settings, capsys):
    assert main(["--db", settings.database_url, "create-token", "--email", "nobody@example.com"]) == 2
    assert "No user found" in capsys.readouterr().err


def test_reset_password(client, settings, db):
    signup(client, email="forgetful@example.com", password="old-password")

    assert main(
        ["--db", settings.database_url, "reset-password", "--email", "forgetful@example.com", "--password", "n3w"]
    ) == 0

    stored = db.execute("SELECT password FROM users WHERE email = ?", ("forgetful@example.com",)).fetchone()
    assert verify_password("n3w", stored["password"])
    assert not verify_password("old-password", stored["password"])
    assert client.post("/api/auth/login", json={"email": "forgetful@example.com", "password": "n3w"}).status_code == 200


def test_reset_password_prompts_when_not_given(client, settings, monkeypatch):
    signup(client, email="prompted@example.com")
    monkeypatch.setattr("getpass.getpass", lambda prompt: "")

    assert main(["--db", settings.database_url, "reset-password", "--email", "prompted@example.com"]) == 1


def test_reset_password_unknown_user(client, settings):
    assert main(
        ["--db", settings.database_url, "reset-password", "--email", "nobody@example.com", "--password", "x"]
    ) == 2
