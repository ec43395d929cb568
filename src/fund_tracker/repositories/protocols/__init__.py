"""Repository protocol definitions (interfaces)."""

from fund_tracker.repositories.protocols.holding_repo import HoldingRepository

__all__ = [
    "HoldingRepository",
]
