"""Timezone utilities for the fund market calendar."""

from datetime import date, datetime
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser

from fund_tracker.config.settings import get_settings


def market_tz() -> pytz.BaseTzInfo:
    """Return the configured market timezone."""
    return pytz.timezone(get_settings().market_timezone)


def now_market() -> datetime:
    """Return current time in the market timezone."""
    return datetime.now(market_tz())


def today_market() -> date:
    """Return today's calendar date in the market timezone."""
    return now_market().date()


def to_market_date(value: Union[date, datetime]) -> date:
    """
    Reduce a date or datetime to a market calendar day.

    Naive datetimes are assumed to already be in market time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(market_tz()).date()
    return value


def parse_market_date(value: str, default: Optional[date] = None) -> date:
    """
    Parse a provider date string (e.g. "2024-07-01") to a calendar day.

    Falls back to `default` (or today) when the string is empty.
    """
    if not value or not value.strip():
        return default or today_market()
    return to_market_date(date_parser.parse(value.strip()))


def days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (to_market_date(end) - to_market_date(start)).days
