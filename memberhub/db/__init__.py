"""Database helpers (models/relations export)."""

from .models import RELATIONS, Base

__all__ = ["Base", "RELATIONS"]
