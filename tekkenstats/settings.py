"""Centralized configuration management for the Tekken stats backend."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so scripts importing :mod:`tekkenstats.settings` observe the
# same values as the long running ingestion jobs.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/tekkenstats.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_ENUMS_FILE = Path(__file__).resolve().parent / "data" / "enums.json"


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    The class wraps the handful of environment variables the backend reads and
    exposes derived helpers (normalized database URL, numeric log level) so
    scripts and services never repeat the parsing logic.
    """

    _explicit_database_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Capture explicit overrides prior to delegating to ``BaseSettings``."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_database_url = "database_url" in normalized_keys
        database_env = os.getenv("DATABASE_URL")
        if database_env is not None and database_env.strip():
            self._explicit_database_url = True

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
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description=(
            "Threshold in seconds after which queries are considered slow for"
            " monitoring instrumentation."
        ),
    )
    enums_file: Path | None = Field(
        default=None,
        alias="ENUMS_FILE",
        description=(
            "Optional path to a JSON document mapping character IDs and dan"
            " rank codes to display names. Defaults to the bundled file."
        ),
    )
    default_game_version: int | None = Field(
        default=None,
        alias="DEFAULT_GAME_VERSION",
        description="Game version used by leaderboards when the caller omits one.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite:
            return DEFAULT_SQLITE_DATABASE_URL

        if not self.database_url:
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
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        url = self.resolved_database_url
        if url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def resolved_enums_file(self) -> Path:
        """Return the enums document path, falling back to the bundled copy."""

        return self.enums_file or DEFAULT_ENUMS_FILE

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
                "DATABASE_URL is not set - falling back to the local SQLite file "
                f"({DEFAULT_SQLITE_DATABASE_URL})"
            )

        if self.default_game_version is None:
            warnings.append(
                "DEFAULT_GAME_VERSION is not set - leaderboards aggregate across "
                "every game version"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


def validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log warnings for optional configuration that was left unset."""

    logger = logging.getLogger(__name__)
    candidate = active_settings or get_settings()
    warnings = candidate.optional_config_warnings()
    if not warnings:
        return

    logger.warning("=" * 60)
    logger.warning("Environment Configuration Warnings:")
    for warning in warnings:
        logger.warning(f"  • {warning}")
    logger.warning("=" * 60)


__all__ = [
    "AppSettings",
    "DEFAULT_ENUMS_FILE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
    "validate_environment",
]
