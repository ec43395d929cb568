"""
Pytest configuration and fixtures for fund tracker tests.

This module provides:
- In-memory SQLite database fixtures
- Factory helpers for holdings
- Deterministic and misbehaving fund data fetchers
- Service and repository fixtures
- FastAPI test client wired to the test database
"""

import threading
import uuid
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from fund_tracker.main import app
from fund_tracker.api import deps
from fund_tracker.repositories.sqlalchemy.database import Base, build_engine, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from fund_tracker.repositories.sqlalchemy import orm_models  # noqa: F401
from fund_tracker.repositories.sqlalchemy import SqlAlchemyHoldingRepository
from fund_tracker.providers.stub_provider import StubFundDataFetcher
from fund_tracker.services import (
    BoundedCache,
    HoldingService,
    PerformanceService,
    RefreshService,
    RetryPolicy,
)
from fund_tracker.domain.models import Holding
from fund_tracker.domain.views import CurrentInfo, TrailingReturns
from fund_tracker.config.settings import reset_settings


NAV_DATE = date(2024, 7, 1)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session_factory(test_engine) -> sessionmaker:
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(test_session_factory) -> Session:
    """Create test database session."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def holding_repo(test_session) -> SqlAlchemyHoldingRepository:
    """Provide test HoldingRepository."""
    return SqlAlchemyHoldingRepository(test_session)


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def make_holding(
    fund_code: str = "000001",
    holding_id: Optional[str] = None,
    client_name: str = "Zhang Wei",
    purchase_amount: Decimal = Decimal("10000"),
    purchase_shares: Decimal = Decimal("10000"),
    purchase_date: date = date(2024, 1, 1),
    **kwargs,
) -> Holding:
    """Build a holding with sensible defaults; market fields via kwargs."""
    return Holding(
        holding_id=holding_id or str(uuid.uuid4()),
        client_name=client_name,
        fund_code=fund_code,
        purchase_amount=purchase_amount,
        purchase_shares=purchase_shares,
        purchase_date=purchase_date,
        **kwargs,
    )


@pytest.fixture
def holding_factory() -> Callable[..., Holding]:
    """Factory for holdings."""
    return make_holding


@pytest.fixture
def stored_holding_factory(holding_repo) -> Callable[..., Holding]:
    """Factory that persists each holding it builds."""

    def create(**kwargs) -> Holding:
        return holding_repo.create(make_holding(**kwargs))

    return create


# =============================================================================
# FUND DATA FIXTURES
# =============================================================================


class DeterministicFundFetcher:
    """
    Deterministic fund data fetcher for testing.

    Known codes return fixed NAVs dated NAV_DATE; others are not found.
    """

    FIXED_NAVS = {
        "000001": ("Huaxia Growth Mixed", Decimal("1.2500")),
        "110022": ("E Fund Consumer Industry", Decimal("3.5000")),
        "161725": ("China Merchants CSI Liquor Index", Decimal("0.9000")),
        "005827": ("E Fund Blue Chip Select Mixed", Decimal("1.8000")),
    }

    def __init__(self, nav_date: date = NAV_DATE):
        self._nav_date = nav_date
        self._lock = threading.Lock()
        self.calls: list[str] = []

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        with self._lock:
            self.calls.append(fund_code)
        if fund_code not in self.FIXED_NAVS:
            return CurrentInfo.not_found(fund_code, self._nav_date)
        name, nav = self.FIXED_NAVS[fund_code]
        return CurrentInfo(
            fund_code=fund_code,
            fund_name=name,
            current_nav=nav,
            nav_date=self._nav_date,
            is_valid=True,
        )

    def fetch_trailing_returns(self, fund_code: str) -> TrailingReturns:
        return TrailingReturns(
            return_1m=Decimal("1.10"),
            return_3m=Decimal("3.30"),
            return_6m=Decimal("6.60"),
            return_1y=Decimal("12.00"),
        )

    def attempts_for(self, fund_code: str) -> int:
        with self._lock:
            return self.calls.count(fund_code)


class FailingFundFetcher(DeterministicFundFetcher):
    """Fetcher that raises for selected codes (or every code)."""

    def __init__(self, failing_codes: Optional[set[str]] = None, nav_date: date = NAV_DATE):
        super().__init__(nav_date)
        self._failing_codes = failing_codes

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        if self._failing_codes is None or fund_code in self._failing_codes:
            with self._lock:
                self.calls.append(fund_code)
            raise ConnectionError("Network unavailable")
        return super().fetch_current(fund_code)


class FlakyFundFetcher(DeterministicFundFetcher):
    """Fetcher whose first `failures` calls per code raise."""

    def __init__(self, failures: int, nav_date: date = NAV_DATE):
        super().__init__(nav_date)
        self._failures = failures

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        info = super().fetch_current(fund_code)
        if self.attempts_for(fund_code) <= self._failures:
            raise TimeoutError("Request timed out")
        return info


class ConcurrencyCountingFetcher(DeterministicFundFetcher):
    """Fetcher that records the peak number of concurrent fetch_current calls."""

    def __init__(self, hold_seconds: float = 0.02, nav_date: date = NAV_DATE):
        super().__init__(nav_date)
        self._hold_seconds = hold_seconds
        self._active = 0
        self.peak = 0

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        with self._lock:
            self._active += 1
            self.peak = max(self.peak, self._active)
        try:
            threading.Event().wait(self._hold_seconds)
            return super().fetch_current(fund_code)
        finally:
            with self._lock:
                self._active -= 1


class CompletionTrackingFetcher(DeterministicFundFetcher):
    """Fetcher that sets `all_done` once `expected` fetches have fully finished."""

    def __init__(self, expected: int, nav_date: date = NAV_DATE):
        super().__init__(nav_date)
        self._expected = expected
        self._finished = 0
        self.all_done = threading.Event()

    def fetch_trailing_returns(self, fund_code: str) -> TrailingReturns:
        returns = super().fetch_trailing_returns(fund_code)
        with self._lock:
            self._finished += 1
            if self._finished >= self._expected:
                self.all_done.set()
        return returns


class BlockingFundFetcher(DeterministicFundFetcher):
    """Fetcher that blocks every call until `release` is set."""

    def __init__(self, nav_date: date = NAV_DATE):
        super().__init__(nav_date)
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        self.started.set()
        self.release.wait(5)
        return super().fetch_current(fund_code)


class RecordingObserver:
    """Refresh observer that records every callback."""

    def __init__(self):
        self.progress = []
        self.summaries = []

    def on_progress(self, progress) -> None:
        self.progress.append(progress)

    def on_complete(self, summary) -> None:
        self.summaries.append(summary)


@pytest.fixture
def fetcher() -> DeterministicFundFetcher:
    """Provide deterministic fund data fetcher."""
    return DeterministicFundFetcher()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def sleeps() -> list[float]:
    """Backoff delays requested by the code under test."""
    return []


@pytest.fixture
def record_sleep(sleeps) -> Callable[[float], None]:
    """Sleep replacement that records instead of waiting."""
    lock = threading.Lock()

    def sleep(seconds: float) -> None:
        with lock:
            sleeps.append(seconds)

    return sleep


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def performance_service() -> PerformanceService:
    """Provide PerformanceService with a fresh cache."""
    return PerformanceService(cache=BoundedCache(capacity=20, evict_count=10))


@pytest.fixture
def holding_service(holding_repo, performance_service) -> HoldingService:
    """Provide HoldingService with test dependencies."""
    return HoldingService(repository=holding_repo, on_change=performance_service.invalidate)


@pytest.fixture
def refresh_service(fetcher, record_sleep, performance_service) -> RefreshService:
    """Provide RefreshService with deterministic fetcher and recorded backoff."""
    return RefreshService(
        fetcher=fetcher,
        retry_policy=RetryPolicy(),
        concurrency_limit=3,
        on_reconciled=performance_service.invalidate,
        sleep=record_sleep,
    )


# =============================================================================
# API CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def api_performance_service() -> PerformanceService:
    """Performance service shared by the API client."""
    return PerformanceService(cache=BoundedCache())


@pytest.fixture
def api_refresh_service(api_performance_service) -> RefreshService:
    """Refresh service used by the API client; offline stub data, no waiting."""
    return RefreshService(
        fetcher=StubFundDataFetcher(),
        on_reconciled=api_performance_service.invalidate,
        sleep=lambda seconds: None,
    )


@pytest.fixture
def client(
    test_engine,
    test_session_factory,
    api_refresh_service,
    api_performance_service,
    monkeypatch,
) -> TestClient:
    """Provide FastAPI test client with test database."""
    monkeypatch.setenv("FUND_TRACKER_DATABASE_URL", "sqlite:///:memory:")
    reset_settings()
    reset_database()
    deps.reset_services()

    def override_get_db():
        session = test_session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_db_session_factory] = lambda: test_session_factory
    app.dependency_overrides[deps.get_performance_service] = lambda: api_performance_service
    app.dependency_overrides[deps.get_refresh_service] = lambda: api_refresh_service
    with TestClient(app) as c:
        yield c
    api_refresh_service.wait_idle(5)
    app.dependency_overrides.clear()
    deps.reset_services()
    reset_database()
    reset_settings()

