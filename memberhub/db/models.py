"""SQLAlchemy models for the four community relations."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    # naive UTC: DuckDB, SQLite and PostgreSQL all round-trip it unchanged
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MemberModel(Base):
    __tablename__ = "members"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    mobile = Column(String(32), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    country = Column(String(128), nullable=True)
    occupation = Column(String(128), nullable=True)
    spouse_name = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    district = Column(String(128), nullable=True)
    pincode = Column(String(16), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class DependentModel(Base):
    __tablename__ = "dependents"

    id = Column(String(64), primary_key=True)
    member_id = Column(String(64), ForeignKey("members.id"), nullable=False)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    school = Column(String(255), nullable=True)


class EventModel(Base):
    __tablename__ = "events"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    venue = Column(String(255), nullable=False)
    adult_rate = Column(Numeric(10, 2), nullable=False)
    kids_rate = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)


class RegistrationModel(Base):
    __tablename__ = "registrations"

    id = Column(String(64), primary_key=True)
    member_id = Column(String(64), ForeignKey("members.id"), nullable=False)
    event_id = Column(String(64), ForeignKey("events.id"), nullable=False)
    # snapshot of the event at booking time
    event_name = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False)
    event_venue = Column(String(255), nullable=False)
    adults = Column(Integer, nullable=False)
    kids = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(32), default="booked", nullable=False)
    registered_at = Column(DateTime, default=utcnow, nullable=False)


members = MemberModel.__table__
dependents = DependentModel.__table__
events = EventModel.__table__
registrations = RegistrationModel.__table__

RELATIONS = {
    "members": members,
    "dependents": dependents,
    "events": events,
    "registrations": registrations,
}
