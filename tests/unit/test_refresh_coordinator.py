"""
Unit tests for RefreshCoordinator.

Tests cover:
- Batch outcomes (all succeed, one fails, empty input)
- Retry with linear backoff and invalid-data handling
- Bounded concurrency
- Progress reporting
- Cancellation and re-entrancy
"""

import threading
from decimal import Decimal

import pytest

from fund_tracker.core.exceptions import RefreshInProgressError, ValidationError
from fund_tracker.domain.models import RefreshCompletion, RefreshState
from fund_tracker.domain.views import RefreshProgress
from fund_tracker.services import RefreshCoordinator, RetryPolicy

from tests.conftest import (
    NAV_DATE,
    BlockingFundFetcher,
    CompletionTrackingFetcher,
    ConcurrencyCountingFetcher,
    DeterministicFundFetcher,
    FailingFundFetcher,
    FlakyFundFetcher,
    make_holding,
)


FIVE_CODES = ["000001", "110022", "161725", "005827", "000001"]


def five_holdings():
    return [make_holding(fund_code=code, holding_id=f"h{i}") for i, code in enumerate(FIVE_CODES, 1)]


def run_in_thread(coordinator, holdings, observer=None):
    """Start coordinator.run on a worker thread; returns (thread, result box)."""
    box = {}

    def target():
        box["summary"] = coordinator.run(holdings, observer=observer)

    thread = threading.Thread(target=target)
    thread.start()
    return thread, box


# =============================================================================
# BATCH OUTCOME TESTS
# =============================================================================


class TestRefreshOutcomes:
    """Tests for the summary of a completed run."""

    def test_all_holdings_succeed(self, fetcher, observer, record_sleep):
        """
        GIVEN 5 holdings and a fetcher that always succeeds
        WHEN I run a refresh
        THEN all 5 are updated and final progress is (5, 5)
        """
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        summary = coordinator.run(five_holdings(), observer=observer)

        assert summary.success_count == 5
        assert summary.failure_count == 0
        assert summary.completion == RefreshCompletion.FINISHED
        assert set(summary.updated) == {"h1", "h2", "h3", "h4", "h5"}
        assert observer.progress[-1] == RefreshProgress(current=5, total=5)
        assert coordinator.state == RefreshState.COMPLETED

    def test_updated_holdings_carry_market_data(self, fetcher, record_sleep):
        """
        GIVEN a holding that has never been loaded
        WHEN it is refreshed
        THEN the updated copy has NAV, NAV date, name and trailing returns
        """
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        summary = coordinator.run([make_holding(fund_code="110022", holding_id="h1")])

        updated = summary.updated["h1"]
        assert updated.is_valid is True
        assert updated.current_nav == Decimal("3.5000")
        assert updated.nav_date == NAV_DATE
        assert updated.fund_name == "E Fund Consumer Industry"
        assert updated.nav_return_1y == Decimal("12.00")
        assert updated.client_name == "Zhang Wei"

    def test_one_holding_fails_every_attempt(self, observer, sleeps, record_sleep):
        """
        GIVEN 5 holdings where the third always raises
        WHEN I run a refresh
        THEN 4 succeed, 1 fails and the failing holding is left untouched
        """
        holdings = [
            make_holding(fund_code=code, holding_id=f"h{i}")
            for i, code in enumerate(["000001", "110022", "999999", "005827", "161725"], 1)
        ]
        fetcher = FailingFundFetcher(failing_codes={"999999"})
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        summary = coordinator.run(holdings, observer=observer)

        assert summary.success_count == 4
        assert summary.failure_count == 1
        assert len(summary.updated) == 4
        assert "h3" not in summary.updated
        assert holdings[2].is_valid is False
        assert holdings[2].current_nav == Decimal("0")
        assert fetcher.attempts_for("999999") == 3
        assert sorted(sleeps) == [0.5, 1.0]
        assert observer.progress[-1] == RefreshProgress(current=5, total=5)

    def test_empty_input_completes_immediately(self, fetcher, observer):
        """
        GIVEN no holdings
        WHEN I run a refresh
        THEN it completes at once with nothing fetched
        """
        coordinator = RefreshCoordinator(fetcher)

        summary = coordinator.run([], observer=observer)

        assert summary.updated == {}
        assert summary.success_count == 0
        assert summary.failure_count == 0
        assert summary.completion == RefreshCompletion.EMPTY
        assert fetcher.calls == []
        assert observer.progress == [RefreshProgress(current=0, total=0)]
        assert observer.summaries == [summary]

    def test_input_holdings_are_not_mutated(self, fetcher, record_sleep):
        """
        GIVEN holdings passed to a run
        WHEN the run succeeds
        THEN the originals keep their pre-refresh data
        """
        holdings = five_holdings()

        RefreshCoordinator(fetcher, sleep=record_sleep).run(holdings)

        assert all(not h.is_valid for h in holdings)
        assert all(h.nav_date is None for h in holdings)

    def test_repeated_runs_are_idempotent(self, fetcher, record_sleep):
        """
        GIVEN a deterministic fetcher
        WHEN I refresh the same holdings twice
        THEN both runs produce the same updates
        """
        holdings = five_holdings()
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        first = coordinator.run(holdings)
        second = coordinator.run(holdings)

        assert first.updated == second.updated


# =============================================================================
# RETRY TESTS
# =============================================================================


class TestRetry:
    """Tests for per-holding retry."""

    def test_transient_failure_recovers(self, sleeps, record_sleep):
        """
        GIVEN a fetcher that times out twice then succeeds
        WHEN I refresh one holding
        THEN it succeeds on the third attempt after 0.5s and 1.0s waits
        """
        fetcher = FlakyFundFetcher(failures=2)
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        summary = coordinator.run([make_holding(fund_code="000001", holding_id="h1")])

        assert summary.success_count == 1
        assert fetcher.attempts_for("000001") == 3
        assert sleeps == [0.5, 1.0]

    def test_invalid_data_is_retried_then_fails(self, fetcher, sleeps, record_sleep):
        """
        GIVEN a fund the provider reports as not found
        WHEN I refresh it
        THEN every attempt is used and the holding counts as a failure
        """
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)

        summary = coordinator.run([make_holding(fund_code="888888", holding_id="h1")])

        assert summary.failure_count == 1
        assert summary.updated == {}
        assert fetcher.attempts_for("888888") == 3
        assert sleeps == [0.5, 1.0]

    def test_attempt_budget_comes_from_policy(self, sleeps, record_sleep):
        fetcher = FailingFundFetcher()
        coordinator = RefreshCoordinator(
            fetcher,
            retry_policy=RetryPolicy(max_attempts=1),
            sleep=record_sleep,
        )

        summary = coordinator.run([make_holding(fund_code="000001")])

        assert summary.failure_count == 1
        assert fetcher.attempts_for("000001") == 1
        assert sleeps == []


# =============================================================================
# CONCURRENCY AND PROGRESS TESTS
# =============================================================================


class TestConcurrency:
    """Tests for the in-flight bound and progress reporting."""

    @pytest.mark.parametrize("limit", [1, 3])
    def test_in_flight_never_exceeds_limit(self, limit, record_sleep):
        """
        GIVEN 12 holdings
        WHEN I refresh with a concurrency limit
        THEN no more than `limit` fetches overlap
        """
        fetcher = ConcurrencyCountingFetcher()
        holdings = [make_holding(fund_code="000001", holding_id=f"h{i}") for i in range(12)]

        summary = RefreshCoordinator(fetcher, concurrency_limit=limit, sleep=record_sleep).run(holdings)

        assert summary.success_count == 12
        assert 1 <= fetcher.peak <= limit

    def test_per_run_limit_overrides_default(self, record_sleep):
        fetcher = ConcurrencyCountingFetcher()
        holdings = [make_holding(fund_code="000001", holding_id=f"h{i}") for i in range(6)]

        RefreshCoordinator(fetcher, concurrency_limit=3, sleep=record_sleep).run(
            holdings, concurrency_limit=1
        )

        assert fetcher.peak == 1

    def test_progress_is_monotonic_and_bounded(self, observer, record_sleep):
        """
        GIVEN a batch where some holdings fail
        WHEN I refresh it
        THEN progress starts at 0, rises by one per holding and ends at total
        """
        holdings = five_holdings() + [make_holding(fund_code="777777", holding_id="bad")]
        coordinator = RefreshCoordinator(DeterministicFundFetcher(), sleep=record_sleep)

        coordinator.run(holdings, observer=observer)

        currents = [p.current for p in observer.progress]
        assert currents == list(range(0, 7))
        assert all(p.total == 6 for p in observer.progress)
        assert coordinator.progress.is_done

    @pytest.mark.parametrize("limit", [0, -1])
    def test_limit_below_one_is_rejected(self, fetcher, limit):
        with pytest.raises(ValidationError):
            RefreshCoordinator(fetcher, concurrency_limit=limit)
        with pytest.raises(ValidationError):
            RefreshCoordinator(fetcher).run([make_holding()], concurrency_limit=limit)


# =============================================================================
# CANCELLATION AND RE-ENTRANCY TESTS
# =============================================================================


class TestCancellation:
    """Tests for cancel() and concurrent run() calls."""

    def test_cancel_stops_launching_and_drops_in_flight_results(self, observer, record_sleep):
        """
        GIVEN a run with limit 1 blocked on its first holding
        WHEN I cancel and then let the fetch finish
        THEN no further holdings are fetched and nothing is reported updated
        """
        fetcher = BlockingFundFetcher()
        coordinator = RefreshCoordinator(fetcher, concurrency_limit=1, sleep=record_sleep)
        thread, box = run_in_thread(coordinator, five_holdings(), observer)

        assert fetcher.started.wait(5)
        coordinator.cancel()
        fetcher.release.set()
        thread.join(5)

        summary = box["summary"]
        assert summary.completion == RefreshCompletion.CANCELLED
        assert summary.updated == {}
        assert summary.failure_count == 5
        assert len(fetcher.calls) == 1
        assert observer.summaries == [summary]
        assert coordinator.state == RefreshState.COMPLETED

    def test_results_finished_before_cancel_are_kept(self, record_sleep):
        """
        GIVEN a run whose two fetches have both finished
        WHEN cancel() is called while the first result is being recorded
        THEN the second result still counts, since it finished before the cancel
        """
        fetcher = CompletionTrackingFetcher(expected=2)
        coordinator = RefreshCoordinator(fetcher, concurrency_limit=2, sleep=record_sleep)
        holdings = [
            make_holding(fund_code="000001", holding_id="h1"),
            make_holding(fund_code="110022", holding_id="h2"),
        ]

        class CancelAfterFirstResult:
            def on_progress(self, progress):
                if progress.current == 1:
                    assert fetcher.all_done.wait(5)
                    # Let the second worker return its outcome
                    threading.Event().wait(0.1)
                    coordinator.cancel()

            def on_complete(self, summary):
                pass

        summary = coordinator.run(holdings, observer=CancelAfterFirstResult())

        assert summary.completion == RefreshCompletion.CANCELLED
        assert summary.success_count == 2
        assert set(summary.updated) == {"h1", "h2"}

    def test_cancel_before_run_cancels_that_run(self, fetcher, record_sleep):
        """
        GIVEN cancel() was called on an idle coordinator
        WHEN the next run starts
        THEN it ends cancelled without fetching, and later runs are unaffected
        """
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)
        coordinator.cancel()

        cancelled = coordinator.run(five_holdings())
        again = coordinator.run(five_holdings())

        assert cancelled.completion == RefreshCompletion.CANCELLED
        assert cancelled.success_count == 0
        assert again.completion == RefreshCompletion.FINISHED
        assert again.success_count == 5

    def test_second_run_while_running_is_rejected(self, record_sleep):
        """
        GIVEN a run in progress
        WHEN run() is called again on the same coordinator
        THEN RefreshInProgressError is raised and the first run completes
        """
        fetcher = BlockingFundFetcher()
        coordinator = RefreshCoordinator(fetcher, sleep=record_sleep)
        thread, box = run_in_thread(coordinator, five_holdings())

        assert fetcher.started.wait(5)
        assert coordinator.is_running
        with pytest.raises(RefreshInProgressError):
            coordinator.run(five_holdings())

        fetcher.release.set()
        thread.join(5)
        assert box["summary"].success_count == 5
