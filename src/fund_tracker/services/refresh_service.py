"""Refresh facade shared by every caller that triggers a fund data refresh."""

import logging
import threading
from typing import Callable, ContextManager, Iterable, Optional

from fund_tracker.config.settings import Settings
from fund_tracker.core.exceptions import RefreshInProgressError
from fund_tracker.domain.models import Holding, RefreshState
from fund_tracker.domain.views import RefreshProgress, RefreshStatus, RefreshSummary
from fund_tracker.providers.fund_data_fetcher import FundDataFetcher
from fund_tracker.repositories.protocols import HoldingRepository
from fund_tracker.services.nav_freshness import NavFreshnessService
from fund_tracker.services.reconciliation import HoldingsReconciler
from fund_tracker.services.refresh_coordinator import (
    DEFAULT_CONCURRENCY_LIMIT,
    RefreshCoordinator,
    RefreshObserver,
)
from fund_tracker.services.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

HoldingSelector = Callable[[list[Holding]], list[Holding]]
RepositoryScope = Callable[[], ContextManager[HoldingRepository]]


class _ForwardingObserver:
    """Tracks progress for status() and forwards it to the caller's observer."""

    def __init__(self, service: "RefreshService", downstream: Optional[RefreshObserver]):
        self._service = service
        self._downstream = downstream

    def on_progress(self, progress: RefreshProgress) -> None:
        self._service._progress = progress
        if self._downstream is not None:
            self._downstream.on_progress(progress)

    def on_complete(self, summary: RefreshSummary) -> None:
        # Forwarded by the service once reconciliation has been persisted
        pass


class RefreshService:
    """
    Runs one refresh at a time against a holdings store.

    Each run: select holdings, refresh them through a fresh
    RefreshCoordinator, reconcile the successful updates into the store in
    one batch, then report the summary. A second run while one is active
    raises RefreshInProgressError.
    """

    def __init__(
        self,
        fetcher: FundDataFetcher,
        retry_policy: Optional[RetryPolicy] = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        on_reconciled: Optional[Callable[[], None]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self._fetcher = fetcher
        self._retry_policy = retry_policy or RetryPolicy()
        self._concurrency_limit = concurrency_limit
        self._on_reconciled = on_reconciled
        self._sleep = sleep
        self._freshness = NavFreshnessService()

        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._coordinator: Optional[RefreshCoordinator] = None
        self._progress = RefreshProgress(current=0, total=0)
        self._last_summary: Optional[RefreshSummary] = None

    @classmethod
    def from_settings(
        cls,
        fetcher: FundDataFetcher,
        settings: Settings,
        on_reconciled: Optional[Callable[[], None]] = None,
    ) -> "RefreshService":
        """Build a service with the configured retry and concurrency limits."""
        return cls(
            fetcher=fetcher,
            retry_policy=RetryPolicy(
                max_attempts=settings.refresh_max_attempts,
                backoff_step_seconds=settings.refresh_backoff_step_seconds,
            ),
            concurrency_limit=settings.refresh_concurrency_limit,
            on_reconciled=on_reconciled,
        )

    # Synchronous runs

    def refresh_all(
        self,
        repository: HoldingRepository,
        observer: Optional[RefreshObserver] = None,
    ) -> RefreshSummary:
        """Refresh every holding in the store."""
        return self._run_exclusive(repository, _select_all, observer)

    def refresh_outdated(
        self,
        repository: HoldingRepository,
        observer: Optional[RefreshObserver] = None,
    ) -> RefreshSummary:
        """Refresh holdings never loaded or behind the newest NAV date."""
        return self._run_exclusive(repository, self._freshness.needing_refresh, observer)

    def refresh_holdings(
        self,
        repository: HoldingRepository,
        holding_ids: Iterable[str],
        observer: Optional[RefreshObserver] = None,
    ) -> RefreshSummary:
        """Refresh only the given holdings (unknown IDs are ignored)."""
        return self._run_exclusive(repository, _select_ids(holding_ids), observer)

    # Background runs

    def start_background(
        self,
        repository_scope: RepositoryScope,
        outdated_only: bool = False,
        observer: Optional[RefreshObserver] = None,
    ) -> threading.Thread:
        """
        Start a run on a worker thread and return immediately.

        The exclusivity check happens before this returns, so callers get
        RefreshInProgressError synchronously.
        """
        coordinator = self._acquire()
        select = self._freshness.needing_refresh if outdated_only else _select_all

        def target() -> None:
            try:
                with repository_scope() as repository:
                    self._run_locked(coordinator, repository, select, observer)
            except Exception:
                logger.exception("Background refresh failed")
            finally:
                self._release()

        thread = threading.Thread(target=target, name="fund-refresh-run", daemon=True)
        thread.start()
        return thread

    # Control and status

    def cancel(self) -> bool:
        """Cancel the active run; returns False if nothing is running."""
        coordinator = self._coordinator
        if coordinator is None:
            return False
        coordinator.cancel()
        return True

    def status(self) -> RefreshStatus:
        if self._coordinator is not None:
            state = RefreshState.RUNNING
        elif self._last_summary is not None:
            state = RefreshState.COMPLETED
        else:
            state = RefreshState.IDLE
        return RefreshStatus(
            state=state,
            progress=self._progress,
            last_summary=self._last_summary,
        )

    @property
    def is_running(self) -> bool:
        return self._coordinator is not None

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no run is active; returns False on timeout."""
        return self._idle.wait(timeout)

    # Internals

    def _run_exclusive(
        self,
        repository: HoldingRepository,
        select: HoldingSelector,
        observer: Optional[RefreshObserver],
    ) -> RefreshSummary:
        coordinator = self._acquire()
        try:
            return self._run_locked(coordinator, repository, select, observer)
        finally:
            self._release()

    def _run_locked(
        self,
        coordinator: RefreshCoordinator,
        repository: HoldingRepository,
        select: HoldingSelector,
        observer: Optional[RefreshObserver],
    ) -> RefreshSummary:
        holdings = select(repository.list_all())
        summary = coordinator.run(holdings, observer=_ForwardingObserver(self, observer))

        HoldingsReconciler(repository).reconcile(summary.updated)
        if self._on_reconciled is not None:
            self._on_reconciled()

        self._last_summary = summary
        if observer is not None:
            observer.on_complete(summary)
        return summary

    def _acquire(self) -> RefreshCoordinator:
        if not self._lock.acquire(blocking=False):
            raise RefreshInProgressError()
        try:
            coordinator = RefreshCoordinator(
                fetcher=self._fetcher,
                retry_policy=self._retry_policy,
                concurrency_limit=self._concurrency_limit,
                sleep=self._sleep,
            )
        except Exception:
            self._lock.release()
            raise
        self._idle.clear()
        # The batch size is known only once the holdings are listed
        self._progress = RefreshProgress(current=0, total=0)
        self._coordinator = coordinator
        return coordinator

    def _release(self) -> None:
        self._coordinator = None
        self._idle.set()
        self._lock.release()


def _select_all(holdings: list[Holding]) -> list[Holding]:
    return holdings


def _select_ids(holding_ids: Iterable[str]) -> HoldingSelector:
    wanted = set(holding_ids)

    def select(holdings: list[Holding]) -> list[Holding]:
        return [h for h in holdings if h.holding_id in wanted]

    return select
