"""View models for refresh runs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from fund_tracker.domain.models import Holding, RefreshCompletion, RefreshState


@dataclass(frozen=True)
class RefreshProgress:
    """Completed items out of total for the current run."""

    current: int
    total: int

    @property
    def is_done(self) -> bool:
        return self.current >= self.total


@dataclass
class RefreshOutcome:
    """Result of one holding's fetch-with-retry sequence."""

    holding_id: str
    fund_code: str
    updated: Optional[Holding] = None
    attempts: int = 0
    last_error: Optional[str] = None
    # Set when the final attempt finished after cancellation was requested
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.updated is not None


@dataclass
class RefreshSummary:
    """Terminal result of a refresh run."""

    updated: dict[str, Holding] = field(default_factory=dict)
    total: int = 0
    completion: RefreshCompletion = RefreshCompletion.FINISHED
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def success_count(self) -> int:
        return len(self.updated)

    @property
    def failure_count(self) -> int:
        return self.total - self.success_count


@dataclass(frozen=True)
class RefreshStatus:
    """Point-in-time snapshot of the refresh facade."""

    state: RefreshState = RefreshState.IDLE
    progress: RefreshProgress = RefreshProgress(current=0, total=0)
    last_summary: Optional[RefreshSummary] = None
