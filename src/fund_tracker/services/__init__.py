"""Service layer - business logic orchestration."""

from fund_tracker.services.profit_calculator import (
    calculate_profit,
    holding_days,
    profit_for,
    quantize_money,
)
from fund_tracker.services.retry_policy import RetryPolicy
from fund_tracker.services.refresh_coordinator import RefreshCoordinator, RefreshObserver
from fund_tracker.services.reconciliation import HoldingsReconciler
from fund_tracker.services.refresh_service import RefreshService
from fund_tracker.services.holding_service import HoldingService, HoldingCreate, HoldingUpdate
from fund_tracker.services.nav_freshness import NavFreshnessService
from fund_tracker.services.bounded_cache import BoundedCache
from fund_tracker.services.performance_service import PerformanceService

__all__ = [
    "calculate_profit",
    "holding_days",
    "profit_for",
    "quantize_money",
    "RetryPolicy",
    "RefreshCoordinator",
    "RefreshObserver",
    "HoldingsReconciler",
    "RefreshService",
    "HoldingService",
    "HoldingCreate",
    "HoldingUpdate",
    "NavFreshnessService",
    "BoundedCache",
    "PerformanceService",
]
