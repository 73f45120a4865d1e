from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import delete, select

from memberhub.core.errors import BackendUnavailableError, SchemaError
from memberhub.db.bootstrap import DEFAULT_EVENTS, count_events, ensure_schema, seed_default_events
from memberhub.db.models import events
from memberhub.repositories.base import Store

pytestmark = pytest.mark.anyio


async def test_bootstrap_seeds_three_events_once(store):
    await ensure_schema(store)
    await ensure_schema(store)

    rows = await store.execute(select(events).order_by(events.c.id))
    assert [row["id"] for row in rows] == ["evt1", "evt2", "evt3"]
    first = rows[0]
    assert first["name"] == "Annual Community Gathering 2025"
    assert first["date"] == date(2025, 3, 15)
    assert first["venue"] == "Community Hall, Ernakulam"
    assert first["adult_rate"] == Decimal("500")
    assert first["kids_rate"] == Decimal("250")
    assert rows[2]["venue"] == "Auditorium, Thiruvananthapuram"


async def test_seeding_again_skips_existing_ids(store):
    # a second bootstrapper racing past the empty check must not duplicate rows
    assert await seed_default_events(store) == 0
    assert await count_events(store) == len(DEFAULT_EVENTS)


async def test_existing_events_are_left_alone(store):
    await store.execute(delete(events).where(events.c.id != "evt3"))
    await ensure_schema(store)
    assert await count_events(store) == 1


class BrokenStore(Store):
    async def execute(self, statement, params=None):
        raise BackendUnavailableError("engine gone")

    async def insert(self, relation, record):
        raise BackendUnavailableError("engine gone")

    async def insert_many(self, items):
        raise BackendUnavailableError("engine gone")

    async def query_one(self, statement, params=None):
        raise BackendUnavailableError("engine gone")

    async def create_all(self, metadata):
        raise BackendUnavailableError("engine gone")

    async def close(self):
        pass


async def test_schema_failure_is_fatal():
    with pytest.raises(SchemaError):
        await ensure_schema(BrokenStore())
