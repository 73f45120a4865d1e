"""Declare the relations and seed the default events on first run."""
from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from memberhub.core.errors import ConflictError, MemberHubError, SchemaError
from memberhub.core.logging import get_logger
from memberhub.repositories.base import Store

from .models import Base, events

logger = get_logger(__name__)

DEFAULT_EVENTS = (
    {
        "id": "evt1",
        "name": "Annual Community Gathering 2025",
        "date": date(2025, 3, 15),
        "venue": "Community Hall, Ernakulam",
        "adult_rate": Decimal("500"),
        "kids_rate": Decimal("250"),
        "description": "Join us for our annual community gathering with cultural programs, food, and networking.",
    },
    {
        "id": "evt2",
        "name": "Youth Sports Festival",
        "date": date(2025, 4, 20),
        "venue": "Sports Complex, Kottayam",
        "adult_rate": Decimal("300"),
        "kids_rate": Decimal("150"),
        "description": "A day of sports activities, competitions, and fun for the whole family.",
    },
    {
        "id": "evt3",
        "name": "Cultural Night 2025",
        "date": date(2025, 5, 10),
        "venue": "Auditorium, Thiruvananthapuram",
        "adult_rate": Decimal("600"),
        "kids_rate": Decimal("300"),
        "description": "An evening of traditional music, dance performances, and cultural celebrations.",
    },
)


async def count_events(store: Store) -> int:
    row = await store.query_one(select(func.count().label("count")).select_from(events))
    return int(row["count"]) if row else 0


async def seed_default_events(store: Store) -> int:
    """Insert the default events one by one; ids already present are skipped."""
    inserted = 0
    for event in DEFAULT_EVENTS:
        try:
            await store.insert("events", event)
        except ConflictError:
            # another bootstrapper got there first
            logger.info("Seed event %s already present", event["id"])
            continue
        inserted += 1
    return inserted


async def ensure_schema(store: Store) -> None:
    """Idempotent: safe to call on every startup. Failures are fatal (SchemaError)."""
    try:
        await store.create_all(Base.metadata)
        if await count_events(store) == 0:
            inserted = await seed_default_events(store)
            logger.info("Seeded %d default events", inserted)
    except SchemaError:
        raise
    except MemberHubError as exc:
        logger.error("Schema bootstrap failed: %s", exc)
        raise SchemaError(f"Schema bootstrap failed: {exc.message}") from exc


if __name__ == "__main__":
    from memberhub.core.config import get_settings
    from memberhub.core.logging import configure_logging
    from memberhub.repositories.factory import build_store

    async def _main() -> None:
        store = build_store(get_settings())
        try:
            await ensure_schema(store)
        finally:
            await store.close()

    configure_logging()
    try:
        asyncio.run(_main())
        print("Database schema ready.")
    except MemberHubError as exc:
        raise SystemExit(f"Failed to prepare database: {exc}") from exc
