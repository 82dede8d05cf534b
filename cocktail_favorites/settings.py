"""Centralized configuration management for the favorite cocktails service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load a local .env before the settings singleton is built so scripts and the
# API observe the same environment.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/favorites.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TREND_REQUIRED_ROLE = "Admin"
DEFAULT_JWT_ALGORITHM = "HS256"


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides plain environment lookups the class exposes a few derived helpers
    (normalized database URL, numeric log level) so that the API, the startup
    scripts and the test-suite share one parsing implementation.
    """

    _explicit_database_url: bool = PrivateAttr(default=False)
    _explicit_cors_allow_origins: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Remember which optional values were supplied explicitly."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_database_url = "database_url" in normalized_keys
        self._explicit_cors_allow_origins = (
            "cors_allow_origins_raw" in normalized_keys
            or "cors_allow_origins" in normalized_keys
        )
        database_env = os.getenv("DATABASE_URL")
        if database_env is not None and database_env.strip():
            self._explicit_database_url = True
        cors_env = os.getenv("CORS_ALLOW_ORIGINS")
        if cors_env is not None and cors_env.strip():
            self._explicit_cors_allow_origins = True

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description=(
            "Force SQLite usage regardless of DATABASE_URL. Helpful for local"
            " development and test suites that do not require PostgreSQL."
        ),
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description=(
            "Comma-separated list of CORS origins. A single ``*`` allows any"
            " origin."
        ),
    )
    db_pool_timeout_seconds: float = Field(
        default=30.0,
        alias="DB_POOL_TIMEOUT_SECONDS",
        description="Seconds to wait for a pooled connection before failing.",
    )
    db_statement_timeout_ms: int = Field(
        default=5000,
        alias="DB_STATEMENT_TIMEOUT_MS",
        description=(
            "Server-side statement timeout applied to PostgreSQL connections."
            " Zero disables the limit."
        ),
    )
    db_startup_max_attempts: int = Field(
        default=10,
        ge=1,
        alias="DB_STARTUP_MAX_ATTEMPTS",
        description="Readiness checks attempted before startup gives up.",
    )
    db_startup_retry_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        alias="DB_STARTUP_RETRY_DELAY_SECONDS",
        description="Fixed delay between two readiness checks.",
    )
    trend_required_role: str = Field(
        default=DEFAULT_TREND_REQUIRED_ROLE,
        alias="TREND_REQUIRED_ROLE",
        description="Role a caller must carry to read per-cocktail trends.",
    )
    jwt_key: str | None = Field(
        default=None,
        alias="JWT_KEY",
        description="Symmetric key used to verify bearer token signatures.",
    )
    jwt_issuer: str | None = Field(
        default=None,
        alias="JWT_ISSUER",
        description="Expected ``iss`` claim of bearer tokens.",
    )
    jwt_audience: str | None = Field(
        default=None,
        alias="JWT_AUDIENCE",
        description="Expected ``aud`` claim of bearer tokens.",
    )
    jwt_algorithm: str = Field(
        default=DEFAULT_JWT_ALGORITHM,
        alias="JWT_ALGORITHM",
        description="Signature algorithm accepted for bearer tokens.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite+aiosqlite"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def jwt_configured(self) -> bool:
        """Return whether key, issuer and audience are all set."""

        return bool(self.jwt_key and self.jwt_issuer and self.jwt_audience)

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_database_url and not self.use_sqlite:
            warnings.append(
                "DATABASE_URL is not set - falling back to the local SQLite database"
                " (not suitable for production)"
            )

        if not self.jwt_configured:
            warnings.append(
                "JWT_KEY, JWT_ISSUER or JWT_AUDIENCE is not set - every"
                " authenticated endpoint will answer 401"
            )

        if not self._explicit_cors_allow_origins and not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only "
                "(may cause CORS issues in production)"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_JWT_ALGORITHM",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_TREND_REQUIRED_ROLE",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
]
