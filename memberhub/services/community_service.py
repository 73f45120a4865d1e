"""
Membership, booking and directory use cases.

The presentation layer calls these methods and renders what they return; it
never talks to the store or the session cache directly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from memberhub.core.errors import (
    BackendUnavailableError,
    ConflictError,
    ErrorCode,
    InvalidCredentialsError,
    MemberHubError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)
from memberhub.core.ids import is_valid_id, new_id
from memberhub.core.logging import get_logger
from memberhub.domain.booking import (
    BookingQuote,
    compute_total,
    default_attendees,
    quote,
    validate_counts,
)
from memberhub.domain.records import Event, Member, Registration
from memberhub.repositories.base import Store
from memberhub.repositories.community_repository import CommunityRepository
from memberhub.services.session_service import SessionCache

logger = get_logger(__name__)

MIN_SEARCH_CHARS = 2
BOOKED = "booked"
REQUIRED_MEMBER_FIELDS = ("full_name", "email", "mobile", "password")


@dataclass
class Outcome:
    """Result of a use case whose failures are recoverable by the caller."""

    ok: bool
    value: Any = None
    code: Optional[ErrorCode] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Outcome":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: MemberHubError) -> "Outcome":
        return cls(ok=False, code=error.code, message=error.message)


@dataclass
class SearchResult:
    query: str
    performed: bool
    members: list[Member] = field(default_factory=list)


class SessionState:
    """Anonymous until a member authenticates."""

    def __init__(self) -> None:
        self.member: Optional[Member] = None

    @property
    def is_authenticated(self) -> bool:
        return self.member is not None

    def authenticate(self, member: Member) -> None:
        self.member = member

    def reset(self) -> None:
        self.member = None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _age(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        age = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Age must be a whole number") from None
    if age < 0:
        raise ValidationError("Age cannot be negative")
    return age


def _dependent_record(data: Mapping[str, Any]) -> Optional[dict]:
    """Return a dependents row for a well-formed entry, None when it has no name."""
    if not isinstance(data, Mapping):
        return None
    name = _clean(data.get("name"))
    if not name:
        return None
    return {
        "id": new_id(),
        "name": name,
        "age": _age(data.get("age")),
        "school": _clean(data.get("school")),
    }


class CommunityService:
    """Auth, registration, booking, search and profile flows for one client."""

    def __init__(self, store: Store, session_cache: SessionCache) -> None:
        self.store = store
        self.repository = CommunityRepository(store)
        self.session_cache = session_cache
        self.state = SessionState()

    # -------------------------------------- helpers --------------------------------------
    @property
    def current_member(self) -> Optional[Member]:
        return self.state.member

    def _require_member(self) -> Member:
        if not self.state.is_authenticated:
            raise NotAuthenticatedError()
        return self.state.member

    async def _load_member(self, member_id: str) -> Optional[Member]:
        member = await self.repository.get_member(member_id)
        if member is not None:
            member.dependents = await self.repository.get_dependents(member.id)
        return member

    # -------------------------------------- session --------------------------------------
    async def restore_session(self) -> Optional[Member]:
        """Trust the cached member only after re-reading it from the store."""
        cached = self.session_cache.load()
        if cached is None:
            self.state.reset()
            return None
        member = None
        if is_valid_id(cached.id):
            member = await self._load_member(cached.id)
        else:
            logger.warning("Cached session id has an unexpected format; discarding")
        if member is None:
            self.session_cache.clear()
            self.state.reset()
            return None
        self.state.authenticate(member)
        self.session_cache.save(member)
        return member

    async def login(self, identifier: str, password: str) -> Outcome:
        ident = _clean(identifier)
        member = None
        if ident and password:
            member = await self.repository.find_member_by_credentials(ident, password)
        if member is None:
            # same answer whether the identifier or the password was wrong
            return Outcome.failure(InvalidCredentialsError())
        member.dependents = await self.repository.get_dependents(member.id)
        self.state.authenticate(member)
        self.session_cache.save(member)
        logger.info("Member %s logged in", member.id)
        return Outcome.success(member, "Welcome back!")

    def logout(self) -> None:
        self.state.reset()
        try:
            self.session_cache.clear()
        except BackendUnavailableError as exc:
            logger.warning("Logged out but the session file remains: %s", exc.message)

    # -------------------------------------- registration --------------------------------------
    def _member_record(self, data: Mapping[str, Any]) -> tuple[dict, list[dict]]:
        record = {
            "full_name": _clean(data.get("full_name")),
            "email": _clean(data.get("email")),
            "mobile": _clean(data.get("mobile")),
            "password": data.get("password") or None,
            "country": _clean(data.get("country")),
            "occupation": _clean(data.get("occupation")),
            "spouse_name": _clean(data.get("spouse_name")),
            "address": _clean(data.get("address")),
            "district": _clean(data.get("district")),
            "pincode": _clean(data.get("pincode")),
        }
        missing = [name for name in REQUIRED_MEMBER_FIELDS if not record[name]]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        record["id"] = new_id()
        kids = [kid for kid in map(_dependent_record, data.get("kids") or []) if kid]
        return record, kids

    async def register(self, data: Mapping[str, Any]) -> Outcome:
        """Create a member and its dependents in one transaction."""
        try:
            record, kids = self._member_record(data)
        except ValidationError as exc:
            return Outcome.failure(exc)
        taken = ConflictError("User with this email or mobile already exists")
        if await self.repository.email_or_mobile_taken(record["email"], record["mobile"]):
            return Outcome.failure(taken)
        try:
            member_id = await self.repository.create_member(record, kids)
        except ConflictError:
            # lost a race with another client; the unique indexes decided
            return Outcome.failure(taken)
        logger.info("Registered member %s with %d dependents", member_id, len(kids))
        return Outcome.success(member_id, "Registration successful! Please login.")

    async def add_dependent(self, data: Mapping[str, Any]) -> Outcome:
        member = self._require_member()
        try:
            record = _dependent_record(data)
            if record is None:
                raise ValidationError("Dependent name is required")
        except ValidationError as exc:
            return Outcome.failure(exc)
        dependent = await self.repository.add_dependent(member.id, record)
        member.dependents.append(dependent)
        self.session_cache.save(member)
        return Outcome.success(dependent)

    # -------------------------------------- events & bookings --------------------------------------
    async def list_events(self) -> list[Event]:
        return await self.repository.list_events()

    async def get_event(self, event_id: str) -> Outcome:
        event = await self.repository.get_event(event_id)
        if event is None:
            return Outcome.failure(NotFoundError("Event not found"))
        return Outcome.success(event)

    def default_attendees(self) -> tuple[int, int]:
        return default_attendees(self.state.member)

    async def quote_booking(self, event_id: str, adults: int, kids: int) -> Outcome:
        """Re-derive the amounts for the current counts without writing anything."""
        try:
            validate_counts(adults, kids)
        except ValidationError as exc:
            return Outcome.failure(exc)
        event = await self.repository.get_event(event_id)
        if event is None:
            return Outcome.failure(NotFoundError("Event not found"))
        result: BookingQuote = quote(event, adults, kids)
        return Outcome.success(result)

    async def book_event(self, event_id: str, adults: int, kids: int) -> Outcome:
        member = self._require_member()
        try:
            validate_counts(adults, kids)
        except ValidationError as exc:
            return Outcome.failure(exc)
        event = await self.repository.get_event(event_id)
        if event is None:
            return Outcome.failure(NotFoundError("Event not found"))
        total = compute_total(event, adults, kids)
        record = {
            "id": new_id(),
            "member_id": member.id,
            "event_id": event.id,
            "event_name": event.name,
            "event_date": event.date,
            "event_venue": event.venue,
            "adults": adults,
            "kids": kids,
            "total_amount": total,
            "paid_amount": total,
            "status": BOOKED,
        }
        try:
            registration_id = await self.repository.create_registration(record)
        except ConflictError as exc:
            return Outcome.failure(exc)
        registration = await self.repository.get_registration(registration_id)
        logger.info("Member %s booked %s (%s adults, %s kids, total %s)", member.id, event.id, adults, kids, total)
        return Outcome.success(registration, "Event registration successful!")

    async def my_registrations(self) -> list[Registration]:
        member = self._require_member()
        return await self.repository.list_registrations(member.id)

    # -------------------------------------- directory & profile --------------------------------------
    async def search_members(self, query: str) -> SearchResult:
        text = (query or "").strip()
        if len(text) < MIN_SEARCH_CHARS:
            return SearchResult(query=text, performed=False)
        return SearchResult(query=text, performed=True, members=await self.repository.search_members(text))

    async def profile(self) -> Outcome:
        """Reload the current member and dependents from the store."""
        member = self._require_member()
        fresh = await self._load_member(member.id)
        if fresh is None:
            self.logout()
            return Outcome.failure(NotFoundError("Member no longer exists"))
        self.state.authenticate(fresh)
        self.session_cache.save(fresh)
        return Outcome.success(fresh)

