"""Holding domain model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

DEFAULT_FUND_NAME = "Not loaded"


@dataclass
class Holding:
    """
    A client's position in one fund purchase lot.

    Market fields (fund_name, current_nav, nav_date, is_valid and the
    trailing returns) are owned by the refresh pipeline; is_valid becomes
    True only after a successful fetch.
    """

    holding_id: str
    client_name: str
    fund_code: str
    purchase_amount: Decimal
    purchase_shares: Decimal
    purchase_date: date
    client_id: str = ""
    remarks: str = ""
    fund_name: str = DEFAULT_FUND_NAME
    current_nav: Decimal = field(default_factory=lambda: Decimal("0"))
    nav_date: Optional[date] = None
    is_valid: bool = False
    is_pinned: bool = False
    pinned_at: Optional[datetime] = None
    nav_return_1m: Optional[Decimal] = None
    nav_return_3m: Optional[Decimal] = None
    nav_return_6m: Optional[Decimal] = None
    nav_return_1y: Optional[Decimal] = None

    def __post_init__(self) -> None:
        for name in ("purchase_amount", "purchase_shares", "current_nav"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                setattr(self, name, Decimal(str(value)))

    @property
    def total_value(self) -> Decimal:
        """Current market value; zero when NAV or share count is negative."""
        if self.current_nav < 0 or self.purchase_shares < 0:
            return Decimal("0")
        return self.current_nav * self.purchase_shares

    @property
    def is_complete(self) -> bool:
        """Return True if the record has everything needed to be tracked."""
        return (
            bool(self.client_name.strip())
            and bool(self.fund_code.strip())
            and self.purchase_amount > 0
            and self.purchase_shares > 0
        )
