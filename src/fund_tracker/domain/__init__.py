"""Domain layer - pure business models with no external dependencies."""

from fund_tracker.domain.models import (
    Holding,
    RefreshState,
    RefreshCompletion,
    PerformanceSortKey,
    SortOrder,
)

__all__ = [
    "Holding",
    "RefreshState",
    "RefreshCompletion",
    "PerformanceSortKey",
    "SortOrder",
]
