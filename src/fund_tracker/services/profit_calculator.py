"""Profit and annualized return calculation."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from fund_tracker.core.timezone import days_between
from fund_tracker.domain.models import Holding
from fund_tracker.domain.views import ProfitResult

DAYS_PER_YEAR = Decimal("365")
CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places for currency/percent display."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def holding_days(purchase_date: date, nav_date: date) -> int:
    """Calendar days held, counting both the purchase day and the NAV day."""
    return days_between(purchase_date, nav_date) + 1


def calculate_profit(
    current_nav: Decimal,
    purchase_shares: Decimal,
    purchase_amount: Decimal,
    purchase_date: date,
    nav_date: Optional[date],
) -> ProfitResult:
    """
    Compute absolute profit and annualized return (percent).

    Returns zeros unless shares > 0, NAV >= 0 and amount > 0. When the NAV
    date precedes the purchase date (or is unknown) the annualized figure
    is zero but the absolute profit is still reported.
    """
    if not (purchase_shares > 0 and current_nav >= 0 and purchase_amount > 0):
        return ProfitResult()

    absolute = current_nav * purchase_shares - purchase_amount
    if nav_date is None:
        return ProfitResult(absolute=absolute)

    days = holding_days(purchase_date, nav_date)
    if days <= 0:
        return ProfitResult(absolute=absolute)

    annualized = (absolute / purchase_amount) / Decimal(days) * DAYS_PER_YEAR * 100
    return ProfitResult(absolute=absolute, annualized=annualized)


def profit_for(holding: Holding) -> ProfitResult:
    """Profit for a stored holding."""
    return calculate_profit(
        current_nav=holding.current_nav,
        purchase_shares=holding.purchase_shares,
        purchase_amount=holding.purchase_amount,
        purchase_date=holding.purchase_date,
        nav_date=holding.nav_date,
    )
