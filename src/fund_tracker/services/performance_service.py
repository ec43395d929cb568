"""Ranking of holdings by realized performance."""

from decimal import Decimal
from typing import Iterable

from fund_tracker.domain.models import Holding, PerformanceSortKey, SortOrder
from fund_tracker.domain.views import PerformanceFilter, PerformanceRow
from fund_tracker.services.bounded_cache import BoundedCache
from fund_tracker.services.profit_calculator import holding_days, profit_for


class PerformanceService:
    """
    Filters and sorts holdings by profit, memoizing each distinct query.

    The cache is keyed by the filter alone, so callers must invalidate()
    whenever holdings change (CRUD or refresh reconciliation).
    """

    def __init__(self, cache: BoundedCache[PerformanceFilter, list[PerformanceRow]]):
        self._cache = cache

    def invalidate(self) -> None:
        self._cache.clear()

    def rank(
        self,
        holdings: Iterable[Holding],
        filters: PerformanceFilter = PerformanceFilter(),
    ) -> list[PerformanceRow]:
        cached = self._cache.get(filters)
        if cached is not None:
            return cached

        rows = [self._to_row(h) for h in holdings if h.is_valid]
        rows = [r for r in rows if self._matches(r, filters)]
        rows.sort(
            key=lambda r: self._sort_value(r, filters.sort_key),
            reverse=filters.sort_order is SortOrder.DESCENDING,
        )
        self._cache.put(filters, rows)
        return rows

    @staticmethod
    def _to_row(holding: Holding) -> PerformanceRow:
        days = holding_days(holding.purchase_date, holding.nav_date) if holding.nav_date else 0
        return PerformanceRow(holding=holding, profit=profit_for(holding), days_held=days)

    @staticmethod
    def _matches(row: PerformanceRow, f: PerformanceFilter) -> bool:
        holding = row.holding
        text = f.text.strip().lower()
        if text and text not in holding.fund_code.lower() and text not in holding.fund_name.lower():
            return False
        if f.min_amount is not None and holding.purchase_amount < f.min_amount:
            return False
        if f.max_amount is not None and holding.purchase_amount > f.max_amount:
            return False
        if f.min_days is not None and row.days_held < f.min_days:
            return False
        if f.max_days is not None and row.days_held > f.max_days:
            return False
        if f.min_annualized is not None and row.profit.annualized < f.min_annualized:
            return False
        if f.max_annualized is not None and row.profit.annualized > f.max_annualized:
            return False
        return True

    @staticmethod
    def _sort_value(row: PerformanceRow, key: PerformanceSortKey) -> Decimal:
        if key is PerformanceSortKey.ABSOLUTE:
            return row.profit.absolute
        if key is PerformanceSortKey.PURCHASE_AMOUNT:
            return row.holding.purchase_amount
        if key is PerformanceSortKey.DAYS_HELD:
            return Decimal(row.days_held)
        return row.profit.annualized
