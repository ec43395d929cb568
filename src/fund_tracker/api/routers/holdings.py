"""Holding endpoints."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from fund_tracker.api.deps import get_holding_service, get_performance_service
from fund_tracker.api.schemas import (
    ClientGroupListResponse,
    ClientGroupResponse,
    HoldingCreateRequest,
    HoldingListResponse,
    HoldingResponse,
    HoldingUpdateRequest,
    OutdatedHoldingsResponse,
    PerformanceResponse,
    PerformanceRowResponse,
)
from fund_tracker.domain.models import PerformanceSortKey, SortOrder
from fund_tracker.domain.views import PerformanceFilter
from fund_tracker.services import (
    HoldingCreate,
    HoldingService,
    HoldingUpdate,
    NavFreshnessService,
    PerformanceService,
)

router = APIRouter(prefix="/holdings", tags=["holdings"])


@router.get("", response_model=HoldingListResponse)
def list_holdings(
    service: HoldingService = Depends(get_holding_service),
) -> HoldingListResponse:
    """List all holdings, pinned first."""
    holdings = service.list_holdings()
    return HoldingListResponse(
        holdings=[HoldingResponse.from_domain(h) for h in holdings],
        count=len(holdings),
    )


@router.post("", response_model=HoldingResponse, status_code=201)
def create_holding(
    data: HoldingCreateRequest,
    service: HoldingService = Depends(get_holding_service),
) -> HoldingResponse:
    """Record a new purchase lot; market data arrives with the next refresh."""
    holding = service.add_holding(
        HoldingCreate(
            client_name=data.client_name,
            client_id=data.client_id,
            fund_code=data.fund_code,
            purchase_amount=data.purchase_amount,
            purchase_shares=data.purchase_shares,
            purchase_date=data.purchase_date,
            remarks=data.remarks,
        )
    )
    return HoldingResponse.from_domain(holding)


@router.get("/outdated", response_model=OutdatedHoldingsResponse)
def get_outdated_holdings(
    service: HoldingService = Depends(get_holding_service),
) -> OutdatedHoldingsResponse:
    """Valid holdings whose NAV date lags the newest NAV date on record."""
    freshness = NavFreshnessService()
    holdings = service.list_holdings()
    outdated = freshness.outdated_holdings(holdings)
    return OutdatedHoldingsResponse(
        benchmark_nav_date=freshness.benchmark_nav_date(holdings),
        fund_codes=freshness.outdated_fund_codes(holdings),
        holdings=[HoldingResponse.from_domain(h) for h in outdated],
    )


@router.get("/by-client", response_model=ClientGroupListResponse)
def get_client_groups(
    service: HoldingService = Depends(get_holding_service),
) -> ClientGroupListResponse:
    """Holdings grouped by client with each client's total market value."""
    groups = service.client_groups()
    return ClientGroupListResponse(
        groups=[ClientGroupResponse.from_domain(g) for g in groups],
        count=len(groups),
    )


@router.get("/performance", response_model=PerformanceResponse)
def get_performance(
    text: str = Query("", description="Substring of fund code or fund name"),
    min_amount: Optional[Decimal] = Query(None),
    max_amount: Optional[Decimal] = Query(None),
    min_days: Optional[int] = Query(None),
    max_days: Optional[int] = Query(None),
    min_annualized: Optional[Decimal] = Query(None),
    max_annualized: Optional[Decimal] = Query(None),
    sort_key: PerformanceSortKey = Query(PerformanceSortKey.ANNUALIZED),
    sort_order: SortOrder = Query(SortOrder.DESCENDING),
    service: HoldingService = Depends(get_holding_service),
    performance: PerformanceService = Depends(get_performance_service),
) -> PerformanceResponse:
    """Rank valid holdings by profit."""
    filters = PerformanceFilter(
        text=text,
        min_amount=min_amount,
        max_amount=max_amount,
        min_days=min_days,
        max_days=max_days,
        min_annualized=min_annualized,
        max_annualized=max_annualized,
        sort_key=sort_key,
        sort_order=sort_order,
    )
    rows = performance.rank(service.list_holdings(), filters)
    return PerformanceResponse(
        rows=[PerformanceRowResponse.from_domain(r) for r in rows],
        count=len(rows),
    )


@router.get("/{holding_id}", response_model=HoldingResponse)
def get_holding(
    holding_id: str,
    service: HoldingService = Depends(get_holding_service),
) -> HoldingResponse:
    """Get a single holding with its profit."""
    return HoldingResponse.from_domain(service.get_holding(holding_id))


@router.put("/{holding_id}", response_model=HoldingResponse)
def update_holding(
    holding_id: str,
    data: HoldingUpdateRequest,
    service: HoldingService = Depends(get_holding_service),
) -> HoldingResponse:
    """Edit a holding's purchase details; market data is left to the next refresh."""
    holding = service.update_holding(holding_id, HoldingUpdate(**data.model_dump()))
    return HoldingResponse.from_domain(holding)


@router.delete("/{holding_id}", status_code=204)
def delete_holding(
    holding_id: str,
    service: HoldingService = Depends(get_holding_service),
) -> Response:
    """Delete a holding."""
    service.delete_holding(holding_id)
    return Response(status_code=204)


@router.post("/{holding_id}/pin", response_model=HoldingResponse)
def toggle_pin(
    holding_id: str,
    service: HoldingService = Depends(get_holding_service),
) -> HoldingResponse:
    """Pin or unpin a holding."""
    return HoldingResponse.from_domain(service.toggle_pin(holding_id))
