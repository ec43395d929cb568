"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from fund_tracker.config.settings import get_settings
from fund_tracker.providers import (
    EastmoneyFundDataFetcher,
    FundDataFetcher,
    StubFundDataFetcher,
)
from fund_tracker.repositories.sqlalchemy import (
    SqlAlchemyHoldingRepository,
    get_db,
    get_session_factory,
)
from fund_tracker.services import (
    BoundedCache,
    HoldingService,
    PerformanceService,
    RefreshService,
)

# Process-wide singletons: refresh exclusivity and the view cache must
# outlive a single request.
_fetcher: Optional[FundDataFetcher] = None
_performance_service: Optional[PerformanceService] = None
_refresh_service: Optional[RefreshService] = None


def get_holding_repo(db: Session = Depends(get_db)) -> SqlAlchemyHoldingRepository:
    """Provide HoldingRepository instance."""
    return SqlAlchemyHoldingRepository(db)


def get_db_session_factory() -> sessionmaker:
    """Provide the session factory for work that outlives the request."""
    return get_session_factory()


def get_fetcher() -> FundDataFetcher:
    """Provide the configured FundDataFetcher."""
    global _fetcher
    if _fetcher is None:
        settings = get_settings()
        if settings.fetcher_backend == "stub":
            _fetcher = StubFundDataFetcher()
        else:
            _fetcher = EastmoneyFundDataFetcher(timeout_seconds=settings.fetch_timeout_seconds)
    return _fetcher


def get_performance_service() -> PerformanceService:
    """Provide PerformanceService instance."""
    global _performance_service
    if _performance_service is None:
        settings = get_settings()
        _performance_service = PerformanceService(
            cache=BoundedCache(
                capacity=settings.view_cache_capacity,
                evict_count=settings.view_cache_evict_count,
            )
        )
    return _performance_service


def get_refresh_service(
    performance: PerformanceService = Depends(get_performance_service),
) -> RefreshService:
    """Provide RefreshService instance."""
    global _refresh_service
    if _refresh_service is None:
        _refresh_service = RefreshService.from_settings(
            fetcher=get_fetcher(),
            settings=get_settings(),
            on_reconciled=performance.invalidate,
        )
    return _refresh_service


def get_holding_service(
    repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    performance: PerformanceService = Depends(get_performance_service),
) -> HoldingService:
    """Provide HoldingService instance."""
    return HoldingService(repository=repo, on_change=performance.invalidate)


def reset_services() -> None:
    """Drop cached singletons (settings changed or tests)."""
    global _fetcher, _performance_service, _refresh_service
    _fetcher = None
    _performance_service = None
    _refresh_service = None
