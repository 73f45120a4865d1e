from __future__ import annotations

from fastapi import APIRouter, Request

from ._shared import get_service

router = APIRouter(prefix="/members", tags=["members"])


@router.get("/search")
async def search_members(request: Request, q: str = ""):
    result = await get_service(request).search_members(q)
    return {"query": result.query, "performed": result.performed, "members": result.members}
