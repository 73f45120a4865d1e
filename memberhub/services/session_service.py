"""Session cache: the logged-in member, persisted across restarts in a JSON file."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from memberhub.core.errors import BackendUnavailableError
from memberhub.core.logging import get_logger
from memberhub.domain.records import Member

logger = get_logger(__name__)

SESSION_SLOT = "current_member"


class SessionCache:
    """One named slot holding the serialized current member; absence means anonymous.

    The cache is never trusted on its own: callers revalidate the cached id
    against the store before using it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def save(self, member: Member) -> None:
        payload = {SESSION_SLOT: member.to_dict()}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.error("Could not write session file %s: %s", self.path, exc)
            raise BackendUnavailableError("Could not save the session") from exc

    def load(self) -> Optional[Member]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("session file does not hold an object")
            raw = data.get(SESSION_SLOT)
            if raw is None:
                return None
            if not isinstance(raw, dict):
                raise ValueError(f"{SESSION_SLOT} is not an object")
            return Member.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Discarding unreadable session file %s: %s", self.path, exc)
            self.clear()
            return None

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove session file %s: %s", self.path, exc)
            raise BackendUnavailableError("Could not clear the session") from exc
