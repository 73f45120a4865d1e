"""Domain records mapped from relation rows.

These are plain objects with no storage concerns; ``from_row`` accepts the
dict rows returned by any Store.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _iso(value: Any) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


@dataclass
class Dependent:
    """A kid or ward attached to one member."""

    id: str
    member_id: str
    name: str
    age: Optional[int] = None
    school: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Dependent":
        age = row.get("age")
        return cls(
            id=row["id"],
            member_id=row["member_id"],
            name=row["name"],
            age=int(age) if age is not None else None,
            school=_text(row.get("school")),
        )


@dataclass
class Member:
    """A registered account holder. The password never leaves the store."""

    id: str
    full_name: str
    email: str
    mobile: str
    country: Optional[str] = None
    occupation: Optional[str] = None
    spouse_name: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None
    pincode: Optional[str] = None
    created_at: Optional[datetime] = None
    dependents: list[Dependent] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], dependents: Optional[list[Dependent]] = None) -> "Member":
        return cls(
            id=row["id"],
            full_name=row["full_name"],
            email=row["email"],
            mobile=row["mobile"],
            country=_text(row.get("country")),
            occupation=_text(row.get("occupation")),
            spouse_name=_text(row.get("spouse_name")),
            address=_text(row.get("address")),
            district=_text(row.get("district")),
            pincode=_text(row.get("pincode")),
            created_at=row.get("created_at"),
            dependents=list(dependents or []),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = _iso(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Member":
        created = data.get("created_at")
        if isinstance(created, str):
            try:
                created = datetime.fromisoformat(created)
            except ValueError:
                created = None
        kids = [Dependent(**kid) for kid in data.get("dependents") or []]
        return cls(
            id=data["id"],
            full_name=data["full_name"],
            email=data["email"],
            mobile=data["mobile"],
            country=data.get("country"),
            occupation=data.get("occupation"),
            spouse_name=data.get("spouse_name"),
            address=data.get("address"),
            district=data.get("district"),
            pincode=data.get("pincode"),
            created_at=created,
            dependents=kids,
        )


@dataclass(frozen=True)
class Event:
    """Reference data: a community activity with per-category pricing."""

    id: str
    name: str
    date: date
    venue: str
    adult_rate: Decimal
    kids_rate: Decimal
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Event":
        return cls(
            id=row["id"],
            name=row["name"],
            date=row["date"],
            venue=row["venue"],
            adult_rate=Decimal(str(row["adult_rate"])),
            kids_rate=Decimal(str(row["kids_rate"])),
            description=row.get("description"),
        )


@dataclass(frozen=True)
class Registration:
    """A booking. Event fields and amounts are a snapshot taken at booking time."""

    id: str
    member_id: str
    event_id: str
    event_name: str
    event_date: date
    event_venue: str
    adults: int
    kids: int
    total_amount: Decimal
    paid_amount: Decimal
    status: str
    registered_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Registration":
        return cls(
            id=row["id"],
            member_id=row["member_id"],
            event_id=row["event_id"],
            event_name=row["event_name"],
            event_date=row["event_date"],
            event_venue=row["event_venue"],
            adults=int(row["adults"]),
            kids=int(row["kids"]),
            total_amount=Decimal(str(row["total_amount"])),
            paid_amount=Decimal(str(row["paid_amount"])),
            status=row["status"],
            registered_at=row.get("registered_at"),
        )
