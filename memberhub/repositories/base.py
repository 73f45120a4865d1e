"""Store contract shared by the embedded and remote backends.

Stores must be swappable: the application core only ever talks to ``Store``.
"""
from __future__ import annotations

import asyncio
import contextlib
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import Table, insert, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.sql import Executable

from memberhub.core.errors import (
    BackendUnavailableError,
    ConflictError,
    QueryError,
)
from memberhub.core.ids import new_id
from memberhub.core.logging import get_logger
from memberhub.db.models import RELATIONS

logger = get_logger(__name__)

Row = dict[str, Any]


class Store(ABC):
    """Interface for persistence operations, independent of the backend."""

    @abstractmethod
    async def execute(self, statement: Executable | str, params: Optional[dict] = None) -> list[Row]:
        """Run a parameterized statement and return its rows in order."""
        ...

    @abstractmethod
    async def insert(self, relation: str, record: dict) -> str:
        """Insert one row and return its identifier (generated when missing)."""
        ...

    @abstractmethod
    async def insert_many(self, items: Iterable[tuple[str, dict]]) -> list[str]:
        """Insert several rows in a single transaction, all or nothing."""
        ...

    @abstractmethod
    async def query_one(self, statement: Executable | str, params: Optional[dict] = None) -> Optional[Row]:
        """Return the first row, or None when the statement yields no rows."""
        ...

    @abstractmethod
    async def create_all(self, metadata) -> None:
        """Declare every relation of ``metadata`` if it does not exist yet."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class _Deadline:
    """Settles, exactly once, whether a worker may commit or its caller gave up waiting."""

    COMMIT = "commit"
    ABANDONED = "abandoned"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: Optional[str] = None

    def _settle(self, state: str) -> bool:
        with self._lock:
            if self._state is None:
                self._state = state
            return self._state == state

    def claim_commit(self) -> bool:
        return self._settle(self.COMMIT)

    def abandon(self) -> bool:
        return self._settle(self.ABANDONED)


def _discard_result(future: asyncio.Future) -> None:
    # nobody awaits an abandoned call; retrieve its outcome so asyncio does not complain
    if not future.cancelled():
        future.exception()


class SQLStore(Store):
    """SQLAlchemy-backed store; subclasses only decide how the engine is built.

    Blocking driver calls run in a worker thread bounded by ``timeout``. When
    the caller stops waiting, the worker's transaction is rolled back instead
    of committed, so a BackendUnavailableError always means nothing was written.
    """

    backend_name = "sql"

    def __init__(self, *, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._engine: Optional[Engine] = None
        self._engine_lock = threading.Lock()
        self._local = threading.local()

    # -------------------------- engine --------------------------
    @abstractmethod
    def _create_engine(self) -> Engine:
        ...

    @property
    def engine(self) -> Engine:
        with self._engine_lock:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

    def _guard(self) -> contextlib.AbstractContextManager:
        return contextlib.nullcontext()

    def _on_begin(self, conn: Connection) -> None:
        """Hook run at the start of every transaction."""

    # -------------------------- plumbing --------------------------
    def _call(self, deadline: _Deadline, fn: Callable, *args):
        with self._guard():
            self._local.deadline = deadline
            try:
                return fn(*args)
            except IntegrityError as exc:
                raise ConflictError(f"Constraint violated: {exc.orig}") from exc
            except (OperationalError, InterfaceError, DisconnectionError) as exc:
                logger.warning("%s store unavailable: %s", self.backend_name, exc)
                raise BackendUnavailableError(f"{self.backend_name} store unavailable") from exc
            except DBAPIError as exc:
                if exc.connection_invalidated:
                    raise BackendUnavailableError(f"{self.backend_name} store unavailable") from exc
                raise QueryError(f"Query failed: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                raise QueryError(f"Query failed: {exc}") from exc
            finally:
                self._local.deadline = None

    async def _run(self, fn: Callable, *args):
        deadline = _Deadline()
        future = asyncio.ensure_future(asyncio.to_thread(self._call, deadline, fn, *args))
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            if not deadline.abandon():
                # the worker is already committing; its result is the real outcome
                return await future
            future.add_done_callback(_discard_result)
            logger.warning("%s store timed out after %ss", self.backend_name, self.timeout)
            raise BackendUnavailableError(f"{self.backend_name} store timed out") from exc

    @contextlib.contextmanager
    def _transaction(self):
        """``engine.begin()`` that rolls back when the caller has given up waiting."""
        deadline = getattr(self._local, "deadline", None)
        with self.engine.connect() as conn:
            with conn.begin():
                self._on_begin(conn)
                yield conn
                if deadline is not None and not deadline.claim_commit():
                    raise BackendUnavailableError(f"{self.backend_name} store timed out; changes rolled back")

    @staticmethod
    def _statement(statement: Executable | str) -> Executable:
        if isinstance(statement, str):
            return text(statement)
        return statement

    @staticmethod
    def _table(relation: str) -> Table:
        try:
            return RELATIONS[relation]
        except KeyError:
            raise QueryError(f"Unknown relation {relation!r}") from None

    @staticmethod
    def _values(table: Table, record: dict) -> dict:
        unknown = sorted(set(record) - set(table.c.keys()))
        if unknown:
            raise QueryError(f"Unknown column(s) for {table.name}: {', '.join(unknown)}")
        values = dict(record)
        if not values.get("id"):
            values["id"] = new_id()
        return values

    # -------------------------- sync bodies --------------------------
    def _execute_sync(self, statement: Executable, params: Optional[dict]) -> list[Row]:
        with self._transaction() as conn:
            result = conn.execute(statement, params)
            if not result.returns_rows:
                return []
            return [dict(row._mapping) for row in result]

    def _insert_sync(self, rows: list[tuple[Table, dict]]) -> None:
        with self._transaction() as conn:
            for table, values in rows:
                conn.execute(insert(table), values)

    def _create_all_sync(self, metadata) -> None:
        metadata.create_all(bind=self.engine)

    # -------------------------- contract --------------------------
    async def execute(self, statement: Executable | str, params: Optional[dict] = None) -> list[Row]:
        return await self._run(self._execute_sync, self._statement(statement), params)

    async def query_one(self, statement: Executable | str, params: Optional[dict] = None) -> Optional[Row]:
        rows = await self.execute(statement, params)
        return rows[0] if rows else None

    async def insert(self, relation: str, record: dict) -> str:
        ids = await self.insert_many([(relation, record)])
        return ids[0]

    async def insert_many(self, items: Iterable[tuple[str, dict]]) -> list[str]:
        rows = []
        for relation, record in items:
            table = self._table(relation)
            rows.append((table, self._values(table, record)))
        if not rows:
            return []
        await self._run(self._insert_sync, rows)
        return [values["id"] for _table, values in rows]

    async def create_all(self, metadata) -> None:
        await self._run(self._create_all_sync, metadata)

    async def close(self) -> None:
        with self._engine_lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            await asyncio.to_thread(engine.dispose)


__all__ = ["Store", "SQLStore", "Row"]
