from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ._shared import get_service, unwrap

router = APIRouter(prefix="/events", tags=["events"])


class BookingRequest(BaseModel):
    adults: int
    kids: int = 0


@router.get("")
async def list_events(request: Request):
    return {"events": await get_service(request).list_events()}


@router.get("/{event_id}")
async def get_event(event_id: str, request: Request):
    return {"event": unwrap(await get_service(request).get_event(event_id))}


@router.get("/{event_id}/quote")
async def quote_event(event_id: str, request: Request, adults: Optional[int] = None, kids: Optional[int] = None):
    svc = get_service(request)
    default_adults, default_kids = svc.default_attendees()
    outcome = await svc.quote_booking(
        event_id,
        default_adults if adults is None else adults,
        default_kids if kids is None else kids,
    )
    return {"quote": unwrap(outcome)}


@router.post("/{event_id}/book", status_code=201)
async def book_event(event_id: str, payload: BookingRequest, request: Request):
    outcome = await get_service(request).book_event(event_id, payload.adults, payload.kids)
    return {"registration": unwrap(outcome), "message": outcome.message}
