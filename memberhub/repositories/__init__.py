"""
Persistence adapters.

Services depend on the ``Store`` contract; the embedded (DuckDB) and remote
(PostgreSQL) implementations are interchangeable behind it.
"""

from .base import Store
from .factory import build_store

__all__ = ["Store", "build_store"]
