"""Store implementation for a relational database reached over the network."""
from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.exc import ArgumentError

from memberhub.core.errors import ConfigurationError
from memberhub.core.logging import get_logger
from memberhub.repositories.base import SQLStore

logger = get_logger(__name__)

PLACEHOLDER_VALUES = {"changeme", "change-me", "placeholder", "todo", "none", "null"}


def is_placeholder(value: str | None) -> bool:
    """Return True for unset values and template leftovers such as YOUR_URL."""
    v = (value or "").strip()
    if not v:
        return True
    lowered = v.lower()
    if lowered.startswith("your_") or lowered in PLACEHOLDER_VALUES:
        return True
    return v.startswith("<") and v.endswith(">")


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _normalize_url(endpoint: str) -> URL:
    try:
        url = make_url(endpoint.strip())
    except ArgumentError as exc:
        raise ConfigurationError("REMOTE_DB_URL is not a valid database URL") from exc
    if url.drivername in {"postgres", "postgresql"}:
        url = url.set(drivername="postgresql+psycopg")
    return url


class RemoteStore(SQLStore):
    """Remote relational service (PostgreSQL, e.g. a hosted Supabase database).

    Endpoint and credential are validated at construction time; a placeholder
    value fails fast with ConfigurationError before any network activity.
    """

    backend_name = "remote"

    def __init__(self, endpoint: str, credential: str, *, timeout: float = 10.0) -> None:
        if is_placeholder(endpoint):
            raise ConfigurationError("REMOTE_DB_URL must be configured to use the remote backend.")
        if is_placeholder(credential):
            raise ConfigurationError("REMOTE_DB_KEY must be configured to use the remote backend.")
        super().__init__(timeout=timeout)
        url = _normalize_url(endpoint)
        # file-based URLs (sqlite) have no server to authenticate against
        if url.host:
            url = url.set(password=credential)
        self.url = url
        try:
            self._engine = self._create_engine()
        except (ArgumentError, ImportError) as exc:
            raise ConfigurationError(f"Unsupported database URL: {url.drivername}") from exc

    def _create_engine(self) -> Engine:
        backend = self.url.get_backend_name()
        connect_args = {}
        if backend == "postgresql":
            connect_args["connect_timeout"] = max(1, int(self.timeout))
        logger.info("Configuring remote database at %s", self.url.render_as_string(hide_password=True))
        engine = create_engine(self.url, pool_pre_ping=True, connect_args=connect_args)
        if backend == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    def _on_begin(self, conn: Connection) -> None:
        if conn.dialect.name == "postgresql":
            # the server cancels and rolls back a statement the client stopped waiting for
            conn.exec_driver_sql(f"SET LOCAL statement_timeout = {max(1, int(self.timeout * 1000))}")
