"""Pick the Store implementation named by the settings."""
from __future__ import annotations

from memberhub.core.config import Settings
from memberhub.core.errors import ConfigurationError
from memberhub.repositories.base import Store
from memberhub.repositories.embedded_store import EmbeddedStore
from memberhub.repositories.remote_store import RemoteStore


def build_store(settings: Settings) -> Store:
    backend = (settings.store_backend or "").strip().lower()
    if backend == "embedded":
        return EmbeddedStore(settings.duckdb_path, timeout=settings.query_timeout_seconds)
    if backend == "remote":
        return RemoteStore(
            settings.remote_db_url,
            settings.remote_db_key,
            timeout=settings.query_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown STORE_BACKEND {settings.store_backend!r} (expected embedded or remote)")
