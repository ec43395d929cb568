"""Domain models package."""

from fund_tracker.domain.models.enums import (
    RefreshState,
    RefreshCompletion,
    PerformanceSortKey,
    SortOrder,
)
from fund_tracker.domain.models.holding import Holding, DEFAULT_FUND_NAME

__all__ = [
    "RefreshState",
    "RefreshCompletion",
    "PerformanceSortKey",
    "SortOrder",
    "Holding",
    "DEFAULT_FUND_NAME",
]
