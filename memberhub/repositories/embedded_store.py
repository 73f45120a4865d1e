"""DuckDB implementation of the Store, running inside the client process."""
from __future__ import annotations

import threading
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from memberhub.core.errors import BackendUnavailableError, NotFoundError
from memberhub.core.logging import get_logger
from memberhub.repositories.base import SQLStore

logger = get_logger(__name__)

MEMORY = ":memory:"


def _quote(path: Path) -> str:
    # EXPORT and IMPORT take a string literal, not a bound parameter
    return "'" + str(path).replace("'", "''") + "'"


class EmbeddedStore(SQLStore):
    """In-process analytical database.

    The engine is initialised once on first use and reused for the lifetime of
    the process. DuckDB connections are not safe for concurrent use, so every
    call goes through one pooled connection under a lock.
    """

    backend_name = "embedded"

    def __init__(self, path: str = MEMORY, *, timeout: float = 10.0) -> None:
        super().__init__(timeout=timeout)
        self.path = (path or MEMORY).strip()
        self._lock = threading.Lock()

    def _create_engine(self) -> Engine:
        if self.path != MEMORY:
            try:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise BackendUnavailableError(f"Cannot create database directory for {self.path}") from exc
        logger.info("Opening embedded database at %s", self.path)
        return create_engine(f"duckdb:///{self.path}", poolclass=StaticPool)

    def _guard(self):
        return self._lock

    # -------------------------- backup --------------------------
    def _driver_sql_sync(self, sql: str) -> None:
        with self._transaction() as conn:
            conn.exec_driver_sql(sql)

    async def export_database(self, target_dir: str | Path) -> Path:
        """Write schema and data as files under ``target_dir`` (created when missing)."""
        target = Path(target_dir)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackendUnavailableError(f"Cannot create export directory {target}") from exc
        await self._run(self._driver_sql_sync, f"EXPORT DATABASE {_quote(target)}")
        logger.info("Exported embedded database to %s", target)
        return target

    async def import_database(self, source_dir: str | Path) -> None:
        """Load a directory written by ``export_database`` into an empty database."""
        source = Path(source_dir)
        if not source.is_dir():
            raise NotFoundError(f"No database export at {source}")
        await self._run(self._driver_sql_sync, f"IMPORT DATABASE {_quote(source)}")
        logger.info("Imported embedded database from %s", source)
