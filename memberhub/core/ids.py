"""Primary key generation for members, dependents and registrations."""
from __future__ import annotations

import re
import uuid

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Return True when value looks like an id produced by new_id()."""
    if not isinstance(value, str):
        return False
    return bool(UUID_RE.fullmatch(value))
