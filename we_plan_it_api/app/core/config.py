"""
Application configuration.

``Settings`` is an immutable dataclass built once at startup by
``Settings.from_env`` and stored on ``app.state``.  Components receive
it from there rather than reading environment variables themselves.
``DATABASE_URL`` is the only required variable; every other field has
a default.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


DEFAULT_TOKEN_SECRET = "secret"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    database_url: str
    project_name: str = "We Plan It API"
    api_version: str = "1.0.0"
    environment: str = "production"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    token_secret: str = DEFAULT_TOKEN_SECRET
    algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Origins allowed to call the API with credentials.  Parsed from the
    # comma-separated ``ORIGIN`` variable.
    allowed_origins: Tuple[str, ...] = field(default=("http://localhost:5173",))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def uses_default_secret(self) -> bool:
        return self.token_secret == DEFAULT_TOKEN_SECRET

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises
        ------
        RuntimeError
            If ``DATABASE_URL`` is not set.  The application must not
            start without a store.
        """
        env = os.environ if environ is None else environ
        database_url = env.get("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL environment variable is not set")

        origins = tuple(
            o.strip() for o in env.get("ORIGIN", "http://localhost:5173").split(",") if o.strip()
        )
        return cls(
            database_url=database_url,
            project_name=env.get("PROJECT_NAME", "We Plan It API"),
            api_version=env.get("API_VERSION", "1.0.0"),
            environment=env.get("ENVIRONMENT", env.get("NODE_ENV", "production")).lower(),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_file=env.get("LOG_FILE") or None,
            token_secret=env.get("TOKEN_SECRET") or DEFAULT_TOKEN_SECRET,
            access_token_expire_days=int(env.get("ACCESS_TOKEN_EXPIRE_DAYS", "7")),
            allowed_origins=origins or ("http://localhost:5173",),
        )
