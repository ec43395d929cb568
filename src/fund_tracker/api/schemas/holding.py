"""Pydantic schemas for holding endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from fund_tracker.domain.models import Holding
from fund_tracker.domain.views import ClientGroup, PerformanceRow
from fund_tracker.services.profit_calculator import profit_for, quantize_money


class HoldingCreateRequest(BaseModel):
    """Request schema for recording a purchase lot."""

    client_name: str = Field(..., min_length=1, max_length=255)
    client_id: str = Field(default="", max_length=64)
    fund_code: str = Field(..., min_length=1, max_length=16, description="Fund code, e.g. 000001")
    purchase_amount: Decimal = Field(..., gt=0)
    purchase_shares: Decimal = Field(..., gt=0)
    purchase_date: date
    remarks: str = ""


class HoldingUpdateRequest(BaseModel):
    """Request schema for editing a holding (partial update)."""

    client_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    client_id: Optional[str] = Field(default=None, max_length=64)
    fund_code: Optional[str] = Field(default=None, min_length=1, max_length=16)
    purchase_amount: Optional[Decimal] = Field(default=None, gt=0)
    purchase_shares: Optional[Decimal] = Field(default=None, gt=0)
    purchase_date: Optional[date] = None
    remarks: Optional[str] = None


class HoldingResponse(BaseModel):
    """Response schema for a single holding, with derived value and profit."""

    model_config = {"from_attributes": True}

    holding_id: str
    client_name: str
    client_id: str
    fund_code: str
    fund_name: str
    purchase_amount: Decimal
    purchase_shares: Decimal
    purchase_date: date
    remarks: str
    current_nav: Decimal
    nav_date: Optional[date] = None
    is_valid: bool
    is_pinned: bool
    pinned_at: Optional[datetime] = None
    nav_return_1m: Optional[Decimal] = None
    nav_return_3m: Optional[Decimal] = None
    nav_return_6m: Optional[Decimal] = None
    nav_return_1y: Optional[Decimal] = None
    total_value: Decimal
    profit_absolute: Decimal
    profit_annualized: Decimal

    @classmethod
    def from_domain(cls, holding: Holding) -> "HoldingResponse":
        profit = profit_for(holding)
        return cls(
            holding_id=holding.holding_id,
            client_name=holding.client_name,
            client_id=holding.client_id,
            fund_code=holding.fund_code,
            fund_name=holding.fund_name,
            purchase_amount=holding.purchase_amount,
            purchase_shares=holding.purchase_shares,
            purchase_date=holding.purchase_date,
            remarks=holding.remarks,
            current_nav=holding.current_nav,
            nav_date=holding.nav_date,
            is_valid=holding.is_valid,
            is_pinned=holding.is_pinned,
            pinned_at=holding.pinned_at,
            nav_return_1m=holding.nav_return_1m,
            nav_return_3m=holding.nav_return_3m,
            nav_return_6m=holding.nav_return_6m,
            nav_return_1y=holding.nav_return_1y,
            total_value=quantize_money(holding.total_value),
            profit_absolute=quantize_money(profit.absolute),
            profit_annualized=quantize_money(profit.annualized),
        )


class HoldingListResponse(BaseModel):
    """Response schema for listing holdings."""

    holdings: list[HoldingResponse]
    count: int


class OutdatedHoldingsResponse(BaseModel):
    """Holdings whose NAV date lags the newest one on record."""

    benchmark_nav_date: Optional[date] = None
    fund_codes: list[str]
    holdings: list[HoldingResponse]


class PerformanceRowResponse(BaseModel):
    """One ranked holding."""

    holding: HoldingResponse
    days_held: int

    @classmethod
    def from_domain(cls, row: PerformanceRow) -> "PerformanceRowResponse":
        return cls(holding=HoldingResponse.from_domain(row.holding), days_held=row.days_held)


class PerformanceResponse(BaseModel):
    """Ranked holdings."""

    rows: list[PerformanceRowResponse]
    count: int


class ClientGroupResponse(BaseModel):
    """One client's holdings and combined market value."""

    client_name: str
    client_id: str
    total_aum: Decimal
    holdings: list[HoldingResponse]

    @classmethod
    def from_domain(cls, group: ClientGroup) -> "ClientGroupResponse":
        return cls(
            client_name=group.client_name,
            client_id=group.client_id,
            total_aum=quantize_money(group.total_aum),
            holdings=[HoldingResponse.from_domain(h) for h in group.holdings],
        )


class ClientGroupListResponse(BaseModel):
    """Holdings grouped by client."""

    groups: list[ClientGroupResponse]
    count: int
