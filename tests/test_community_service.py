from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import func, select, update

from memberhub.core.errors import ErrorCode, NotAuthenticatedError
from memberhub.core.ids import is_valid_id, new_id
from memberhub.db.models import dependents, events, members
from memberhub.domain.records import Member
from memberhub.repositories.base import Store
from memberhub.services.community_service import CommunityService
from memberhub.services.session_service import SessionCache

pytestmark = pytest.mark.anyio


class CountingStore(Store):
    """Delegates to a real store and counts the queries issued."""

    def __init__(self, inner: Store) -> None:
        self.inner = inner
        self.queries = 0

    async def execute(self, statement, params=None):
        self.queries += 1
        return await self.inner.execute(statement, params)

    async def query_one(self, statement, params=None):
        self.queries += 1
        return await self.inner.query_one(statement, params)

    async def insert(self, relation, record):
        return await self.inner.insert(relation, record)

    async def insert_many(self, items):
        return await self.inner.insert_many(items)

    async def create_all(self, metadata):
        await self.inner.create_all(metadata)

    async def close(self):
        await self.inner.close()


async def _count(store, table) -> int:
    row = await store.query_one(select(func.count().label("n")).select_from(table))
    return int(row["n"])


async def test_register_login_book_and_search(service, member_data):
    registered = await service.register(member_data())
    assert registered.ok
    assert is_valid_id(registered.value)

    login = await service.login("anna@example.com", "s3cret")
    assert login.ok
    member = login.value
    assert member.id == registered.value
    assert [kid.name for kid in member.dependents] == ["Elsa"]
    assert service.state.is_authenticated
    assert service.session_cache.load().id == member.id

    booking = await service.book_event("evt1", 1, 0)
    assert booking.ok
    registration = booking.value
    assert registration.total_amount == Decimal("500")
    assert registration.paid_amount == Decimal("500")
    assert registration.status == "booked"
    assert registration.event_name == "Annual Community Gathering 2025"
    assert registration.member_id == member.id

    found = await service.search_members("nakul")
    assert found.performed
    assert [m.id for m in found.members] == [member.id]

    history = await service.my_registrations()
    assert [r.id for r in history] == [registration.id]


async def test_login_accepts_mobile(service, member_data):
    await service.register(member_data())
    outcome = await service.login(" 9847000001 ", "s3cret")
    assert outcome.ok


async def test_login_failure_does_not_reveal_which_part_was_wrong(service, member_data):
    await service.register(member_data())

    wrong_password = await service.login("anna@example.com", "nope")
    unknown_user = await service.login("ghost@example.com", "s3cret")

    assert not wrong_password.ok
    assert wrong_password.code is ErrorCode.INVALID_CREDENTIALS
    assert (wrong_password.code, wrong_password.message) == (unknown_user.code, unknown_user.message)
    assert not service.state.is_authenticated
    assert service.session_cache.load() is None


@pytest.mark.parametrize("field,value", [("email", "anna@example.com"), ("mobile", "9847000001")])
async def test_duplicate_email_or_mobile_is_rejected_without_partial_rows(service, member_data, field, value):
    assert (await service.register(member_data())).ok

    second = member_data(email="other@example.com", mobile="9847000002", kids=[{"name": "Ben"}])
    second[field] = value
    outcome = await service.register(second)

    assert not outcome.ok
    assert outcome.code is ErrorCode.CONFLICT
    assert await _count(service.store, members) == 1
    assert await _count(service.store, dependents) == 1


async def test_backend_uniqueness_wins_when_precheck_is_bypassed(service, member_data, monkeypatch):
    assert (await service.register(member_data())).ok

    async def never_taken(email, mobile):
        return False

    monkeypatch.setattr(service.repository, "email_or_mobile_taken", never_taken)
    outcome = await service.register(member_data(mobile="9847000002", kids=[{"name": "Ben"}]))

    assert outcome.code is ErrorCode.CONFLICT
    assert await _count(service.store, members) == 1
    assert await _count(service.store, dependents) == 1


async def test_register_validates_input(service, member_data):
    missing = await service.register(member_data(email="  "))
    assert missing.code is ErrorCode.VALIDATION

    bad_age = await service.register(member_data(kids=[{"name": "Elsa", "age": "seven"}]))
    assert bad_age.code is ErrorCode.VALIDATION
    assert await _count(service.store, members) == 0


async def test_nameless_dependents_are_skipped(service, member_data):
    outcome = await service.register(member_data(kids=[{"name": "Elsa"}, {"name": "  "}, {"age": 3}]))
    assert outcome.ok
    assert await _count(service.store, dependents) == 1


async def test_booking_requires_login(service):
    with pytest.raises(NotAuthenticatedError):
        await service.book_event("evt1", 1, 0)
    with pytest.raises(NotAuthenticatedError):
        await service.my_registrations()


async def test_booking_rejects_bad_counts_and_unknown_events(service, member_data):
    await service.register(member_data())
    await service.login("anna@example.com", "s3cret")

    negative = await service.book_event("evt1", -1, 0)
    assert negative.code is ErrorCode.VALIDATION

    missing = await service.book_event("evt404", 1, 0)
    assert missing.code is ErrorCode.NOT_FOUND
    assert await service.my_registrations() == []


async def test_booked_amounts_do_not_follow_event_rate_changes(remote_store, session_cache, member_data):
    service = CommunityService(remote_store, session_cache)
    await service.register(member_data())
    await service.login("anna@example.com", "s3cret")
    booking = await service.book_event("evt1", 2, 3)
    assert booking.value.total_amount == Decimal("1750")

    await remote_store.execute(
        update(events).where(events.c.id == "evt1").values(adult_rate=Decimal("900"), kids_rate=Decimal("450"))
    )

    [stored] = await service.my_registrations()
    assert stored.total_amount == Decimal("1750")
    assert stored.paid_amount == Decimal("1750")
    assert (await service.quote_booking("evt1", 2, 3)).value.total == Decimal("3150")


async def test_restore_session_revalidates_against_store(service, member_data, session_cache):
    await service.register(member_data())
    await service.login("anna@example.com", "s3cret")

    restarted = CommunityService(service.store, session_cache)
    restored = await restarted.restore_session()
    assert restored is not None
    assert restarted.state.is_authenticated
    assert [kid.name for kid in restored.dependents] == ["Elsa"]


async def test_stale_session_is_cleared(service, session_cache):
    session_cache.save(Member(id=new_id(), full_name="Gone", email="gone@example.com", mobile="0"))

    assert await service.restore_session() is None
    assert not service.state.is_authenticated
    assert not session_cache.path.exists()


async def test_tampered_session_file_falls_back_to_anonymous(service, session_cache):
    session_cache.path.parent.mkdir(parents=True, exist_ok=True)
    session_cache.path.write_text('{"current_member": "tampered"}', encoding="utf-8")

    assert await service.restore_session() is None
    assert not service.state.is_authenticated
    assert not session_cache.path.exists()


async def test_malformed_session_id_is_cleared_without_querying(store, session_cache):
    counting = CountingStore(store)
    service = CommunityService(counting, session_cache)
    session_cache.save(Member(id="id_1700000000000_abc123def", full_name="Old", email="o@x", mobile="1"))

    assert await service.restore_session() is None
    assert counting.queries == 0
    assert session_cache.load() is None


async def test_search_needs_two_characters(store, session_cache):
    counting = CountingStore(store)
    service = CommunityService(counting, session_cache)

    idle = await service.search_members("a")
    assert not idle.performed
    assert idle.members == []
    assert counting.queries == 0

    result = await service.search_members("an")
    assert result.performed
    assert counting.queries == 1


async def test_search_is_case_insensitive_across_fields(service, member_data):
    await service.register(member_data())
    await service.register(
        member_data(
            full_name="Bijo Varghese",
            email="bijo@example.com",
            mobile="9847000777",
            district="Kottayam",
            country="UAE",
            kids=[],
        )
    )

    assert [m.full_name for m in (await service.search_members("ANNA")).members] == ["Anna Mathew"]
    assert [m.full_name for m in (await service.search_members("kotta")).members] == ["Bijo Varghese"]
    assert [m.full_name for m in (await service.search_members("000777")).members] == ["Bijo Varghese"]
    assert [m.full_name for m in (await service.search_members("uae")).members] == ["Bijo Varghese"]
    assert len((await service.search_members("example.com")).members) == 2
    assert (await service.search_members("zz-nobody")).members == []


async def test_search_treats_wildcards_literally(service, member_data):
    await service.register(member_data())
    await service.register(
        member_data(full_name="Bijo Varghese", email="bijo_v@example.com", mobile="9847000777", kids=[])
    )

    assert (await service.search_members("%%")).members == []
    assert (await service.search_members("a_n")).members == []
    assert [m.full_name for m in (await service.search_members("o_v")).members] == ["Bijo Varghese"]


async def test_logout_returns_to_anonymous(service, member_data):
    await service.register(member_data())
    await service.login("anna@example.com", "s3cret")

    service.logout()

    assert not service.state.is_authenticated
    assert service.session_cache.load() is None
    service.logout()


async def test_add_dependent_and_reload_profile(service, member_data):
    await service.register(member_data(kids=[]))
    await service.login("anna@example.com", "s3cret")

    added = await service.add_dependent({"name": "Noah", "age": "4"})
    assert added.ok
    assert added.value.age == 4
    assert (await service.add_dependent({"name": ""})).code is ErrorCode.VALIDATION

    profile = await service.profile()
    assert [kid.name for kid in profile.value.dependents] == ["Noah"]
    assert [kid.name for kid in service.session_cache.load().dependents] == ["Noah"]


async def test_quote_uses_current_rates_and_default_attendees(service, member_data):
    assert service.default_attendees() == (0, 0)
    await service.register(member_data())
    await service.login("anna@example.com", "s3cret")
    assert service.default_attendees() == (1, 1)

    quote = await service.quote_booking("evt2", *service.default_attendees())
    assert quote.value.total == Decimal("450")
    assert (await service.quote_booking("evt2", 0, -1)).code is ErrorCode.VALIDATION
    assert (await service.quote_booking("nope", 1, 0)).code is ErrorCode.NOT_FOUND


async def test_list_and_get_events(service):
    listed = await service.list_events()
    assert [e.id for e in listed] == ["evt1", "evt2", "evt3"]
    assert (await service.get_event("evt3")).value.kids_rate == Decimal("300")
    assert (await service.get_event("evt9")).code is ErrorCode.NOT_FOUND
