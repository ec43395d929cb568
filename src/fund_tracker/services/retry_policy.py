"""Retry policy for per-holding fetches."""

from dataclasses import dataclass

from fund_tracker.core.exceptions import ValidationError

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_STEP_SECONDS = 0.5


@dataclass(frozen=True)
class RetryPolicy:
    """
    Linear backoff with a fixed attempt budget.

    Attempt indices start at 0. backoff(i) is the wait before attempt i,
    so the first attempt never waits: 0s, 0.5s, 1.0s with the defaults.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_step_seconds: float = DEFAULT_BACKOFF_STEP_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1")
        if self.backoff_step_seconds < 0:
            raise ValidationError("backoff_step_seconds cannot be negative")

    def should_retry(self, attempt_index: int) -> bool:
        """Whether another attempt may follow a failed attempt_index."""
        return attempt_index + 1 < self.max_attempts

    def backoff(self, attempt_index: int) -> float:
        """Seconds to wait before starting attempt_index."""
        return max(attempt_index, 0) * self.backoff_step_seconds

    @property
    def total_backoff(self) -> float:
        """Upper bound of waiting imposed on one holding."""
        return sum(self.backoff(i) for i in range(self.max_attempts))
