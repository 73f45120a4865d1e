"""FastAPI entry point exposing the community core to a local UI."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from memberhub.core.config import Settings
from memberhub.core.errors import MemberHubError
from memberhub.core.logging import configure_logging, get_logger
from memberhub.routers import auth as auth_router
from memberhub.routers import events as events_router
from memberhub.routers import members as members_router
from memberhub.routers._shared import status_for
from memberhub.services import CommunityService, startup

logger = get_logger(__name__)


async def _memberhub_error(request: Request, exc: MemberHubError) -> JSONResponse:
    status = status_for(exc.code)
    if status >= 500:
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": exc.message, "code": exc.code.value}, status_code=status)


def create_app(settings: Optional[Settings] = None, service: Optional[CommunityService] = None) -> FastAPI:
    """Factory for uvicorn. One process serves one client session."""
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = service or await startup(settings)
        app.state.community_service = svc
        try:
            yield
        finally:
            if service is None:
                await svc.store.close()

    app = FastAPI(title="memberhub", lifespan=lifespan)
    app.add_exception_handler(MemberHubError, _memberhub_error)
    app.include_router(auth_router.router)
    app.include_router(events_router.router)
    app.include_router(members_router.router)
    return app
