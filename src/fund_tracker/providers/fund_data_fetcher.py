"""Fund data provider protocol."""

from typing import Protocol

from fund_tracker.domain.views import CurrentInfo, TrailingReturns


class FundDataFetcher(Protocol):
    """
    Protocol for fund data providers.

    Both calls may raise (transport failure) or, for fetch_current, return
    normally with is_valid=False (unknown fund or not yet published).
    Callers treat both as retryable.
    """

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        """Fetch the latest published NAV, NAV date and fund name."""
        ...

    def fetch_trailing_returns(self, fund_code: str) -> TrailingReturns:
        """Fetch trailing 1m/3m/6m/1y NAV returns (percent)."""
        ...
