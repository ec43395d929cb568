"""Enumerations for domain models."""

from enum import Enum


class RefreshState(str, Enum):
    """Lifecycle of a single refresh run."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"


class RefreshCompletion(str, Enum):
    """How a completed refresh run ended."""

    FINISHED = "FINISHED"
    EMPTY = "EMPTY"  # no holdings, nothing fetched
    CANCELLED = "CANCELLED"


class PerformanceSortKey(str, Enum):
    """Sort keys for the performance ranking."""

    ANNUALIZED = "ANNUALIZED"
    ABSOLUTE = "ABSOLUTE"
    PURCHASE_AMOUNT = "PURCHASE_AMOUNT"
    DAYS_HELD = "DAYS_HELD"


class SortOrder(str, Enum):
    """Sort direction."""

    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"
