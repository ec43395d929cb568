"""Holding repository protocol."""

from typing import Mapping, Optional, Protocol

from fund_tracker.domain.models import Holding


class HoldingRepository(Protocol):
    """
    Interface for holdings data access.

    The store is the sole long-term owner of Holding records. The refresh
    pipeline writes to it only through apply_updates followed by persist,
    once per run.
    """

    def list_all(self) -> list[Holding]:
        """List all holdings, pinned first, then by client and fund code."""
        ...

    def get_by_id(self, holding_id: str) -> Optional[Holding]:
        """Retrieve a holding by ID."""
        ...

    def create(self, holding: Holding) -> Holding:
        """Persist a new holding."""
        ...

    def update(self, holding: Holding) -> Holding:
        """Save user-owned fields of an existing holding; market fields are left alone."""
        ...

    def delete(self, holding_id: str) -> None:
        """Delete a holding."""
        ...

    def apply_updates(self, updated: Mapping[str, Holding]) -> int:
        """
        Stage refreshed holdings by ID without committing.

        IDs no longer present in the store are skipped. Returns the number
        of holdings changed.
        """
        ...

    def persist(self) -> None:
        """Commit staged changes."""
        ...
