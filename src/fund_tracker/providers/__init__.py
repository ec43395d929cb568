"""Fund data providers module."""

from fund_tracker.providers.fund_data_fetcher import FundDataFetcher
from fund_tracker.providers.eastmoney_provider import EastmoneyFundDataFetcher
from fund_tracker.providers.stub_provider import StubFundDataFetcher

__all__ = [
    "FundDataFetcher",
    "EastmoneyFundDataFetcher",
    "StubFundDataFetcher",
]
