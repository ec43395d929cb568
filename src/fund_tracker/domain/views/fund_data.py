"""Fund data as reported by a provider."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CurrentInfo:
    """Latest published valuation for one fund."""

    fund_code: str
    fund_name: str
    current_nav: Decimal
    nav_date: date
    is_valid: bool

    @classmethod
    def not_found(cls, fund_code: str, as_of: date) -> "CurrentInfo":
        """Placeholder for a fund the provider does not know (yet)."""
        return cls(
            fund_code=fund_code,
            fund_name="N/A",
            current_nav=Decimal("0"),
            nav_date=as_of,
            is_valid=False,
        )


@dataclass(frozen=True)
class TrailingReturns:
    """Trailing NAV returns in percent; providers may omit any horizon."""

    return_1m: Optional[Decimal] = None
    return_3m: Optional[Decimal] = None
    return_6m: Optional[Decimal] = None
    return_1y: Optional[Decimal] = None
