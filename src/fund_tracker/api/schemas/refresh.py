"""Pydantic schemas for refresh endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from fund_tracker.domain.models import RefreshCompletion, RefreshState
from fund_tracker.domain.views import RefreshProgress, RefreshStatus, RefreshSummary


class RefreshProgressResponse(BaseModel):
    current: int
    total: int

    @classmethod
    def from_domain(cls, progress: RefreshProgress) -> "RefreshProgressResponse":
        return cls(current=progress.current, total=progress.total)


class RefreshSummaryResponse(BaseModel):
    """Terminal summary of a refresh run."""

    completion: RefreshCompletion
    total: int
    success_count: int
    failure_count: int
    updated_ids: list[str]
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, summary: RefreshSummary) -> "RefreshSummaryResponse":
        return cls(
            completion=summary.completion,
            total=summary.total,
            success_count=summary.success_count,
            failure_count=summary.failure_count,
            updated_ids=sorted(summary.updated),
            started_at=summary.started_at,
            finished_at=summary.finished_at,
        )


class RefreshStatusResponse(BaseModel):
    """Current refresh state, progress and the last run's summary."""

    state: RefreshState
    progress: RefreshProgressResponse
    last_summary: Optional[RefreshSummaryResponse] = None

    @classmethod
    def from_domain(cls, status: RefreshStatus) -> "RefreshStatusResponse":
        return cls(
            state=status.state,
            progress=RefreshProgressResponse.from_domain(status.progress),
            last_summary=(
                RefreshSummaryResponse.from_domain(status.last_summary)
                if status.last_summary is not None
                else None
            ),
        )


class RefreshCancelResponse(BaseModel):
    cancelled: bool
