"""View models for fund data, refresh runs and performance outputs."""

from fund_tracker.domain.views.fund_data import CurrentInfo, TrailingReturns
from fund_tracker.domain.views.refresh import (
    RefreshProgress,
    RefreshOutcome,
    RefreshSummary,
    RefreshStatus,
)
from fund_tracker.domain.views.performance import (
    ProfitResult,
    PerformanceFilter,
    PerformanceRow,
)
from fund_tracker.domain.views.client import ClientGroup

__all__ = [
    "CurrentInfo",
    "TrailingReturns",
    "RefreshProgress",
    "RefreshOutcome",
    "RefreshSummary",
    "RefreshStatus",
    "ProfitResult",
    "PerformanceFilter",
    "PerformanceRow",
    "ClientGroup",
]
