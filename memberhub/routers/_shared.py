from __future__ import annotations

from fastapi import HTTPException, Request

from memberhub.core.errors import ErrorCode
from memberhub.services.community_service import CommunityService, Outcome

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.VALIDATION: 422,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.NOT_AUTHENTICATED: 401,
    ErrorCode.BACKEND_UNAVAILABLE: 503,
}


def status_for(code: ErrorCode | None) -> int:
    return STATUS_BY_CODE.get(code, 500)


def get_service(request: Request) -> CommunityService:
    svc = getattr(getattr(request.app, "state", None), "community_service", None)
    if not svc:
        raise RuntimeError("CommunityService not configured")
    return svc


def unwrap(outcome: Outcome):
    """Return the outcome value or raise the matching HTTP error."""
    if not outcome.ok:
        raise HTTPException(status_for(outcome.code), outcome.message)
    return outcome.value
