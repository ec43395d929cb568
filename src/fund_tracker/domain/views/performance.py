"""View models for profit and performance ranking."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from fund_tracker.domain.models import Holding, PerformanceSortKey, SortOrder


@dataclass(frozen=True)
class ProfitResult:
    """Absolute profit and annualized return (percent)."""

    absolute: Decimal = field(default_factory=lambda: Decimal("0"))
    annualized: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass(frozen=True)
class PerformanceFilter:
    """
    Filters and ordering for the performance ranking.

    Frozen so it can key the view cache.
    """

    text: str = ""
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    min_days: Optional[int] = None
    max_days: Optional[int] = None
    min_annualized: Optional[Decimal] = None
    max_annualized: Optional[Decimal] = None
    sort_key: PerformanceSortKey = PerformanceSortKey.ANNUALIZED
    sort_order: SortOrder = SortOrder.DESCENDING


@dataclass(frozen=True)
class PerformanceRow:
    """One ranked holding."""

    holding: Holding
    profit: ProfitResult
    days_held: int
