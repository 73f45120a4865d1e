"""Domain records and pure booking rules."""

from .booking import BookingQuote, compute_total, default_attendees, quote, validate_counts
from .records import Dependent, Event, Member, Registration

__all__ = [
    "BookingQuote",
    "Dependent",
    "Event",
    "Member",
    "Registration",
    "compute_total",
    "default_attendees",
    "quote",
    "validate_counts",
]
