"""Backend-neutral data access helpers built on the Store contract."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import or_, select

from memberhub.db.models import dependents, events, members, registrations
from memberhub.domain.records import Dependent, Event, Member, Registration
from memberhub.repositories.base import Store

SEARCH_COLUMNS = (
    members.c.full_name,
    members.c.email,
    members.c.mobile,
    members.c.district,
    members.c.country,
)
LIKE_ESCAPE = "!"


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere in a value."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f"%{text}%"


class CommunityRepository:
    """Query builders shared by every backend; values are always bound."""

    def __init__(self, store: Store) -> None:
        self.store = store

    # -------------------------- members --------------------------
    async def get_member(self, member_id: str) -> Optional[Member]:
        row = await self.store.query_one(select(members).where(members.c.id == member_id))
        return Member.from_row(row) if row else None

    async def find_member_by_credentials(self, identifier: str, password: str) -> Optional[Member]:
        stmt = (
            select(members)
            .where(or_(members.c.email == identifier, members.c.mobile == identifier))
            .where(members.c.password == password)
        )
        row = await self.store.query_one(stmt)
        return Member.from_row(row) if row else None

    async def email_or_mobile_taken(self, email: str, mobile: str) -> bool:
        stmt = select(members.c.id).where(or_(members.c.email == email, members.c.mobile == mobile))
        return await self.store.query_one(stmt) is not None

    async def create_member(self, record: dict, kids: list[dict]) -> str:
        """Insert a member and its dependents atomically; returns the member id."""
        items = [("members", record)]
        items.extend(("dependents", {**kid, "member_id": record["id"]}) for kid in kids)
        ids = await self.store.insert_many(items)
        return ids[0]

    async def search_members(self, text: str) -> list[Member]:
        pattern = _contains_pattern(text)
        stmt = (
            select(members)
            .where(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in SEARCH_COLUMNS)))
            .order_by(members.c.full_name, members.c.id)
        )
        return [Member.from_row(row) for row in await self.store.execute(stmt)]

    # -------------------------- dependents --------------------------
    async def get_dependents(self, member_id: str) -> list[Dependent]:
        stmt = select(dependents).where(dependents.c.member_id == member_id).order_by(dependents.c.name, dependents.c.id)
        return [Dependent.from_row(row) for row in await self.store.execute(stmt)]

    async def add_dependent(self, member_id: str, record: dict) -> Dependent:
        values = {**record, "member_id": member_id}
        values["id"] = await self.store.insert("dependents", values)
        return Dependent.from_row(values)

    # -------------------------- events --------------------------
    async def list_events(self) -> list[Event]:
        stmt = select(events).order_by(events.c.date, events.c.id)
        return [Event.from_row(row) for row in await self.store.execute(stmt)]

    async def get_event(self, event_id: str) -> Optional[Event]:
        row = await self.store.query_one(select(events).where(events.c.id == event_id))
        return Event.from_row(row) if row else None

    # -------------------------- registrations --------------------------
    async def create_registration(self, record: dict) -> str:
        return await self.store.insert("registrations", record)

    async def get_registration(self, registration_id: str) -> Optional[Registration]:
        row = await self.store.query_one(select(registrations).where(registrations.c.id == registration_id))
        return Registration.from_row(row) if row else None

    async def list_registrations(self, member_id: str) -> list[Registration]:
        stmt = (
            select(registrations)
            .where(registrations.c.member_id == member_id)
            .order_by(registrations.c.registered_at.desc(), registrations.c.id)
        )
        return [Registration.from_row(row) for row in await self.store.execute(stmt)]
