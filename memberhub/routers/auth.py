from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ._shared import get_service, unwrap

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    identifier: str
    password: str


class KidIn(BaseModel):
    name: str = ""
    age: Optional[int] = None
    school: Optional[str] = None


class RegisterRequest(BaseModel):
    full_name: str
    email: str
    mobile: str
    password: str
    country: Optional[str] = None
    occupation: Optional[str] = None
    spouse_name: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None
    pincode: Optional[str] = None
    kids: list[KidIn] = []


@router.post("/auth/login")
async def login(payload: LoginRequest, request: Request):
    outcome = await get_service(request).login(payload.identifier, payload.password)
    return {"member": unwrap(outcome), "message": outcome.message}


@router.post("/auth/logout")
async def logout(request: Request):
    get_service(request).logout()
    return {"ok": True}


@router.post("/auth/register", status_code=201)
async def register(payload: RegisterRequest, request: Request):
    outcome = await get_service(request).register(payload.model_dump())
    return {"id": unwrap(outcome), "message": outcome.message}


@router.get("/me")
async def me(request: Request):
    return {"member": unwrap(await get_service(request).profile())}


@router.post("/me/dependents", status_code=201)
async def add_dependent(payload: KidIn, request: Request):
    return {"dependent": unwrap(await get_service(request).add_dependent(payload.model_dump()))}


@router.get("/me/registrations")
async def my_registrations(request: Request):
    return {"registrations": await get_service(request).my_registrations()}
