"""Pydantic schemas for API request/response."""

from fund_tracker.api.schemas.holding import (
    HoldingCreateRequest,
    HoldingUpdateRequest,
    HoldingResponse,
    HoldingListResponse,
    OutdatedHoldingsResponse,
    PerformanceRowResponse,
    PerformanceResponse,
    ClientGroupResponse,
    ClientGroupListResponse,
)
from fund_tracker.api.schemas.refresh import (
    RefreshProgressResponse,
    RefreshSummaryResponse,
    RefreshStatusResponse,
    RefreshCancelResponse,
)

__all__ = [
    "HoldingCreateRequest",
    "HoldingUpdateRequest",
    "HoldingResponse",
    "HoldingListResponse",
    "OutdatedHoldingsResponse",
    "PerformanceRowResponse",
    "PerformanceResponse",
    "ClientGroupResponse",
    "ClientGroupListResponse",
    "RefreshProgressResponse",
    "RefreshSummaryResponse",
    "RefreshStatusResponse",
    "RefreshCancelResponse",
]
