"""Stub fund data provider for offline/testing use."""

from datetime import timedelta
from decimal import Decimal
import random

from fund_tracker.core.timezone import today_market
from fund_tracker.domain.views import CurrentInfo, TrailingReturns


# Deterministic fake data for common fund codes
_STUB_FUNDS: dict[str, tuple[str, Decimal]] = {
    "000001": ("Huaxia Growth Mixed", Decimal("1.1520")),
    "110022": ("E Fund Consumer Industry", Decimal("3.4870")),
    "161725": ("China Merchants CSI Liquor Index", Decimal("0.9312")),
    "005827": ("E Fund Blue Chip Select Mixed", Decimal("1.8045")),
    "260108": ("Invesco Great Wall Emerging Growth", Decimal("1.5970")),
}


class StubFundDataFetcher:
    """
    Stub provider with deterministic fake data for offline operation.

    Known codes get fixed NAVs; unknown six-digit codes get a NAV derived
    from a seeded generator. Anything else is reported as not found.
    """

    def __init__(self, seed: int = 42):
        """Initialize with optional random seed for reproducibility."""
        self._seed = seed

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        """Return stub NAV for the fund (previous calendar day)."""
        nav_date = today_market() - timedelta(days=1)
        code = fund_code.strip()
        if code in _STUB_FUNDS:
            name, nav = _STUB_FUNDS[code]
        elif code.isdigit() and len(code) == 6:
            rng = random.Random(f"{self._seed}:{code}")
            nav = Decimal(str(0.5 + rng.random() * 3)).quantize(Decimal("0.0001"))
            name = f"Fund {code}"
        else:
            return CurrentInfo.not_found(code, nav_date)

        return CurrentInfo(
            fund_code=code,
            fund_name=name,
            current_nav=nav,
            nav_date=nav_date,
            is_valid=True,
        )

    def fetch_trailing_returns(self, fund_code: str) -> TrailingReturns:
        """Return stub trailing returns; the 1y horizon is left unpublished."""
        rng = random.Random(f"{self._seed}:{fund_code}:returns")

        def pct() -> Decimal:
            return Decimal(str((rng.random() - 0.4) * 20)).quantize(Decimal("0.01"))

        return TrailingReturns(return_1m=pct(), return_3m=pct(), return_6m=pct())
