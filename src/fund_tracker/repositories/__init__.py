"""Repository layer - data access abstractions and implementations."""

from fund_tracker.repositories.protocols import HoldingRepository

__all__ = [
    "HoldingRepository",
]
