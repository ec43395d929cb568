"""Detection of holdings whose NAV lags the rest of the book."""

from datetime import date
from typing import Iterable, Optional

from fund_tracker.domain.models import Holding


class NavFreshnessService:
    """
    Compares each valid holding's NAV date to the newest one on record.

    The newest NAV date among valid holdings is the benchmark; valid
    holdings published on any other day are outdated. Holdings that have
    never been fetched successfully are neither fresh nor outdated.
    """

    @staticmethod
    def benchmark_nav_date(holdings: Iterable[Holding]) -> Optional[date]:
        dates = [h.nav_date for h in holdings if h.is_valid and h.nav_date is not None]
        return max(dates) if dates else None

    def outdated_holdings(self, holdings: Iterable[Holding]) -> list[Holding]:
        holdings = list(holdings)
        benchmark = self.benchmark_nav_date(holdings)
        if benchmark is None:
            return []
        return [h for h in holdings if h.is_valid and h.nav_date != benchmark]

    def up_to_date_holdings(self, holdings: Iterable[Holding]) -> list[Holding]:
        holdings = list(holdings)
        benchmark = self.benchmark_nav_date(holdings)
        if benchmark is None:
            return []
        return [h for h in holdings if h.is_valid and h.nav_date == benchmark]

    def outdated_fund_codes(self, holdings: Iterable[Holding]) -> list[str]:
        return sorted({h.fund_code for h in self.outdated_holdings(holdings)})

    def needing_refresh(self, holdings: Iterable[Holding]) -> list[Holding]:
        """Holdings never loaded plus holdings behind the benchmark, in input order."""
        holdings = list(holdings)
        outdated_ids = {h.holding_id for h in self.outdated_holdings(holdings)}
        return [h for h in holdings if not h.is_valid or h.holding_id in outdated_ids]
