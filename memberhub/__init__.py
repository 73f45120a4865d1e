"""memberhub: community membership and event registration client core."""

__version__ = "0.1.0"
