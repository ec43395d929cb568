"""Batch write-back of refresh results into the holdings store."""

import logging
from typing import Mapping

from fund_tracker.domain.models import Holding
from fund_tracker.repositories.protocols import HoldingRepository

logger = logging.getLogger(__name__)


class HoldingsReconciler:
    """
    Applies a run's successful updates to the store in one step.

    Holdings absent from the map keep their last-known data. The store is
    persisted even when the map is empty so every run ends the same way.
    """

    def __init__(self, repository: HoldingRepository):
        self._repository = repository

    def reconcile(self, updated: Mapping[str, Holding]) -> int:
        """Apply updates by ID, persist, and return how many were applied."""
        applied = self._repository.apply_updates(updated)
        self._repository.persist()
        logger.info("Reconciled %d of %d refreshed holding(s)", applied, len(updated))
        return applied
