"""Bounded-concurrency refresh of fund market data."""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Callable, Iterable, Optional, Protocol

from fund_tracker.core.exceptions import (
    FundDataError,
    RefreshInProgressError,
    ValidationError,
)
from fund_tracker.core.timezone import now_market
from fund_tracker.domain.models import Holding, RefreshCompletion, RefreshState
from fund_tracker.domain.views import RefreshOutcome, RefreshProgress, RefreshSummary
from fund_tracker.providers.fund_data_fetcher import FundDataFetcher
from fund_tracker.services.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY_LIMIT = 3


class RefreshObserver(Protocol):
    """Receives progress ticks and the terminal summary of a run."""

    def on_progress(self, progress: RefreshProgress) -> None:
        ...

    def on_complete(self, summary: RefreshSummary) -> None:
        ...


class RefreshCoordinator:
    """
    Refreshes a batch of holdings from a FundDataFetcher.

    At most `concurrency_limit` holdings are in flight at once; each worker
    runs one holding's fetch-with-retry sequence to completion. Outcomes
    are collected only by the thread that called run(), which is also the
    only place progress advances, so the result map and the progress
    counter need no locking.

    Nothing is written back to any store here. The caller receives the
    id -> updated Holding map in the RefreshSummary and reconciles it in
    one step.
    """

    def __init__(
        self,
        fetcher: FundDataFetcher,
        retry_policy: Optional[RetryPolicy] = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        _check_concurrency_limit(concurrency_limit)
        self._fetcher = fetcher
        self._policy = retry_policy or RetryPolicy()
        self._concurrency_limit = concurrency_limit
        # Injected sleep for tests; by default backoff waits on the cancel event
        self._sleep = sleep
        self._cancel_event = threading.Event()
        self._state = RefreshState.IDLE
        self._progress = RefreshProgress(current=0, total=0)

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def progress(self) -> RefreshProgress:
        return self._progress

    @property
    def is_running(self) -> bool:
        return self._state is RefreshState.RUNNING

    def cancel(self) -> None:
        """
        Stop launching holdings and stop retrying.

        Attempts still running at that moment complete but their results
        are dropped; results that finished earlier are kept.
        A cancel requested before run() starts cancels that run.
        """
        logger.info("Refresh cancellation requested")
        self._cancel_event.set()

    def run(
        self,
        holdings: Iterable[Holding],
        observer: Optional[RefreshObserver] = None,
        concurrency_limit: Optional[int] = None,
    ) -> RefreshSummary:
        """
        Refresh every holding and return the successful updates.

        Per-holding failures never raise; they are counted in
        failure_count. Raises RefreshInProgressError if this coordinator is
        already running and ValidationError for a limit below 1.
        """
        limit = self._concurrency_limit if concurrency_limit is None else concurrency_limit
        _check_concurrency_limit(limit)
        if self.is_running:
            raise RefreshInProgressError()

        batch = list(holdings)
        summary = RefreshSummary(total=len(batch), started_at=now_market())
        self._state = RefreshState.RUNNING
        self._progress = RefreshProgress(current=0, total=len(batch))
        logger.info("Refreshing %d holding(s), concurrency limit %d", len(batch), limit)

        try:
            self._notify_progress(observer)
            if not batch:
                return self._finish(summary, RefreshCompletion.EMPTY, observer)

            self._drain(batch, limit, summary, observer)

            completion = (
                RefreshCompletion.CANCELLED
                if self._cancel_event.is_set()
                else RefreshCompletion.FINISHED
            )
            return self._finish(summary, completion, observer)
        finally:
            self._state = RefreshState.COMPLETED
            self._cancel_event.clear()

    def _drain(
        self,
        batch: list[Holding],
        limit: int,
        summary: RefreshSummary,
        observer: Optional[RefreshObserver],
    ) -> None:
        remaining = iter(batch)
        pending: dict[Future, Holding] = {}

        with ThreadPoolExecutor(max_workers=limit, thread_name_prefix="fund-refresh") as executor:

            def launch_next() -> bool:
                if self._cancel_event.is_set():
                    return False
                holding = next(remaining, None)
                if holding is None:
                    return False
                pending[executor.submit(self._fetch_with_retry, holding)] = holding
                return True

            while len(pending) < limit and launch_next():
                pass

            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    del pending[future]
                    self._record(future.result(), summary, observer)
                    launch_next()

    def _record(
        self,
        outcome: RefreshOutcome,
        summary: RefreshSummary,
        observer: Optional[RefreshObserver],
    ) -> None:
        total = self._progress.total
        self._progress = RefreshProgress(
            current=min(self._progress.current + 1, total),
            total=total,
        )

        if outcome.succeeded and not outcome.cancelled:
            summary.updated[outcome.holding_id] = outcome.updated
            logger.debug(
                "Fund %s refreshed after %d attempt(s)",
                outcome.fund_code,
                outcome.attempts,
            )
        elif outcome.succeeded:
            logger.debug("Dropping result for fund %s after cancellation", outcome.fund_code)
        else:
            logger.warning(
                "Fund %s refresh failed after %d attempt(s): %s",
                outcome.fund_code,
                outcome.attempts,
                outcome.last_error,
            )

        self._notify_progress(observer)

    def _fetch_with_retry(self, holding: Holding) -> RefreshOutcome:
        outcome = RefreshOutcome(holding_id=holding.holding_id, fund_code=holding.fund_code)
        attempt = 0
        while True:
            outcome.attempts = attempt + 1
            try:
                outcome.updated = self._attempt(holding)
                outcome.last_error = None
                outcome.cancelled = self._cancel_event.is_set()
                return outcome
            except Exception as exc:
                # Transport errors and invalid data are both retryable
                outcome.last_error = str(exc)
                logger.warning(
                    "Fund %s attempt %d/%d failed: %s",
                    holding.fund_code,
                    attempt + 1,
                    self._policy.max_attempts,
                    exc,
                )

            if not self._policy.should_retry(attempt) or self._cancel_event.is_set():
                return outcome
            attempt += 1
            if self._wait(self._policy.backoff(attempt)):
                return outcome

    def _attempt(self, holding: Holding) -> Holding:
        info = self._fetcher.fetch_current(holding.fund_code)
        if not info.is_valid:
            raise FundDataError(holding.fund_code, "provider reported no valid NAV")

        returns = self._fetcher.fetch_trailing_returns(holding.fund_code)
        return replace(
            holding,
            fund_name=info.fund_name,
            current_nav=info.current_nav,
            nav_date=info.nav_date,
            is_valid=True,
            nav_return_1m=returns.return_1m,
            nav_return_3m=returns.return_3m,
            nav_return_6m=returns.return_6m,
            nav_return_1y=returns.return_1y,
        )

    def _wait(self, seconds: float) -> bool:
        """Back off before the next attempt; returns True if cancelled."""
        if self._sleep is not None:
            if seconds > 0:
                self._sleep(seconds)
            return self._cancel_event.is_set()
        return self._cancel_event.wait(seconds)

    def _notify_progress(self, observer: Optional[RefreshObserver]) -> None:
        if observer is not None:
            observer.on_progress(self._progress)

    def _finish(
        self,
        summary: RefreshSummary,
        completion: RefreshCompletion,
        observer: Optional[RefreshObserver],
    ) -> RefreshSummary:
        summary.completion = completion
        summary.finished_at = now_market()
        self._state = RefreshState.COMPLETED
        logger.info(
            "Refresh %s: %d succeeded, %d failed",
            completion.value.lower(),
            summary.success_count,
            summary.failure_count,
        )
        if observer is not None:
            observer.on_complete(summary)
        return summary


def _check_concurrency_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError(f"concurrency_limit must be at least 1, got {limit}")
