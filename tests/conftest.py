"""Shared fixtures: temporary DuckDB and SQLite databases plus a session file."""
from __future__ import annotations

import pytest

from memberhub.core import config as core_config
from memberhub.db.bootstrap import ensure_schema
from memberhub.repositories.embedded_store import EmbeddedStore
from memberhub.repositories.remote_store import RemoteStore
from memberhub.services.community_service import CommunityService
from memberhub.services.session_service import SessionCache

REMOTE_KEY = "test-secret"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def fresh_settings():
    core_config.get_settings.cache_clear()
    yield
    core_config.get_settings.cache_clear()


def make_store(kind: str, tmp_path):
    if kind == "embedded":
        return EmbeddedStore(str(tmp_path / "embedded.duckdb"))
    return RemoteStore(f"sqlite:///{tmp_path / 'remote.db'}", REMOTE_KEY)


@pytest.fixture(params=["embedded", "remote"])
async def store(request, tmp_path):
    """A bootstrapped store, once per backend."""
    s = make_store(request.param, tmp_path)
    await ensure_schema(s)
    yield s
    await s.close()


@pytest.fixture
async def remote_store(tmp_path):
    s = make_store("remote", tmp_path)
    await ensure_schema(s)
    yield s
    await s.close()


@pytest.fixture
def session_cache(tmp_path):
    return SessionCache(tmp_path / "session" / "session.json")


@pytest.fixture
def service(store, session_cache):
    return CommunityService(store, session_cache)


def _member_data(**overrides) -> dict:
    data = {
        "full_name": "Anna Mathew",
        "email": "anna@example.com",
        "mobile": "9847000001",
        "password": "s3cret",
        "country": "India",
        "occupation": "Teacher",
        "spouse_name": "Joseph Mathew",
        "address": "12 Church Road",
        "district": "Ernakulam",
        "pincode": "682001",
        "kids": [{"name": "Elsa", "age": 7, "school": "St. Mary's"}],
    }
    data.update(overrides)
    return data


@pytest.fixture
def member_data():
    """Factory for registration payloads; keyword arguments override fields."""
    return _member_data
