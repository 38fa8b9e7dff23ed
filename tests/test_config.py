import pytest

from we_plan_it_api.app.core.config import DEFAULT_TOKEN_SECRET, Settings
from we_plan_it_api.app.main import create_app


def test_database_url_is_required():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        Settings.from_env({})


def test_create_app_refuses_to_start_without_database(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(RuntimeError):
        create_app()


def test_defaults():
    settings = Settings.from_env({"DATABASE_URL": "app.db"})

    assert settings.allowed_origins == ("http://localhost:5173",)
    assert settings.token_secret == DEFAULT_TOKEN_SECRET
    assert settings.uses_default_secret
    assert settings.access_token_expire_days == 7
    assert not settings.is_development


def test_origins_and_environment_are_parsed():
    settings = Settings.from_env(
        {
            "DATABASE_URL": "app.db",
            "ORIGIN": "https://a.example, https://b.example,",
            "NODE_ENV": "development",
            "TOKEN_SECRET": "s3cret",
        }
    )

    assert settings.allowed_origins == ("https://a.example", "https://b.example")
    assert settings.is_development
    assert not settings.uses_default_secret


def test_settings_are_immutable():
    settings = Settings.from_env({"DATABASE_URL": "app.db"})

    with pytest.raises(AttributeError):
        settings.token_secret = "changed"
