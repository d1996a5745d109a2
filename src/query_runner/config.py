"""Configuration for the query runner using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Runner settings, loaded from ``QUERY_RUNNER_*`` environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="QUERY_RUNNER_",
        env_file=str(_PACKAGE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Connection defaults (applied when the request leaves them empty)
    # ------------------------------------------------------------------
    default_port: int = 5432
    default_sslmode: str = "disable"
    application_name: str = "query-runner"

    # Seconds to wait for the server; None blocks until the OS gives up.
    connect_timeout: int | None = None

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------
    # When false, an unknown data_type silently runs as a raw query.
    strict_mode: bool = True

    # ------------------------------------------------------------------
    # Logging (stderr only; stdout carries the response envelope)
    # ------------------------------------------------------------------
    log_level: str = "WARNING"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings singleton."""
    return Settings()
