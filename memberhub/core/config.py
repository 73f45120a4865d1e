"""
Configuration helpers for the memberhub client.

Settings are read once from environment variables so that stores and services
never touch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    store_backend: str
    duckdb_path: str
    remote_db_url: str
    remote_db_key: str
    query_timeout_seconds: float
    session_file: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        store_backend=(os.getenv("STORE_BACKEND") or "embedded").strip().lower(),
        duckdb_path=os.getenv("DUCKDB_PATH", "data/memberhub.duckdb"),
        remote_db_url=os.getenv("REMOTE_DB_URL", ""),
        remote_db_key=os.getenv("REMOTE_DB_KEY", ""),
        query_timeout_seconds=_float(os.getenv("QUERY_TIMEOUT_SECONDS", "10"), 10.0),
        session_file=os.getenv("SESSION_FILE", "data/session.json"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
