"""
High-level use cases for memberhub.

Each service module orchestrates the store and the session cache to implement
business rules (register, login, book an event, search the directory).
Routers call these services instead of issuing queries themselves.
"""
from __future__ import annotations

from typing import Optional

from memberhub.core.config import Settings, get_settings
from memberhub.core.logging import get_logger
from memberhub.db.bootstrap import ensure_schema
from memberhub.repositories.factory import build_store

from .community_service import CommunityService, Outcome, SearchResult, SessionState
from .session_service import SessionCache

logger = get_logger(__name__)


async def startup(settings: Optional[Settings] = None) -> CommunityService:
    """Build the store, prepare the schema and restore any cached session.

    ConfigurationError and SchemaError propagate: the client must not run
    without a usable backend.
    """
    settings = settings or get_settings()
    store = build_store(settings)
    try:
        await ensure_schema(store)
    except Exception:
        await store.close()
        raise
    service = CommunityService(store, SessionCache(settings.session_file))
    member = await service.restore_session()
    logger.info(
        "memberhub ready (backend=%s, session=%s)",
        settings.store_backend,
        member.id if member else "anonymous",
    )
    return service


__all__ = ["CommunityService", "Outcome", "SearchResult", "SessionCache", "SessionState", "startup"]
