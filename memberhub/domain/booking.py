"""Attendee counts and amounts for an event booking."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from memberhub.core.errors import ValidationError
from memberhub.domain.records import Event, Member

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class BookingQuote:
    adults: int
    kids: int
    adult_total: Decimal
    kids_total: Decimal
    total: Decimal


def _count(value: object, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number")
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return value


def validate_counts(adults: object, kids: object) -> tuple[int, int]:
    """Reject negative or non-integer counts. There is no upper bound here."""
    return _count(adults, "Number of adults"), _count(kids, "Number of kids")


def quote(event: Event, adults: int, kids: int) -> BookingQuote:
    adults, kids = validate_counts(adults, kids)
    adult_total = (adults * Decimal(event.adult_rate)).quantize(CENTS)
    kids_total = (kids * Decimal(event.kids_rate)).quantize(CENTS)
    return BookingQuote(
        adults=adults,
        kids=kids,
        adult_total=adult_total,
        kids_total=kids_total,
        total=adult_total + kids_total,
    )


def compute_total(event: Event, adults: int, kids: int) -> Decimal:
    return quote(event, adults, kids).total


def default_attendees(member: Optional[Member]) -> tuple[int, int]:
    """Initial counts offered to a member: themselves plus one seat per dependent."""
    if member is None:
        return 0, 0
    return 1, len(member.dependents)
