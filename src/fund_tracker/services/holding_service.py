"""Holding management service."""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from fund_tracker.core.exceptions import NotFoundError, ValidationError
from fund_tracker.core.timezone import now_market
from fund_tracker.domain.models import Holding
from fund_tracker.domain.views import ClientGroup
from fund_tracker.repositories.protocols import HoldingRepository

logger = logging.getLogger(__name__)


@dataclass
class HoldingCreate:
    """Input data for recording a purchase lot."""

    client_name: str
    fund_code: str
    purchase_amount: Decimal
    purchase_shares: Decimal
    purchase_date: date
    client_id: str = ""
    remarks: str = ""


@dataclass
class HoldingUpdate:
    """Partial edit of a holding's user-owned fields."""

    client_name: Optional[str] = None
    client_id: Optional[str] = None
    fund_code: Optional[str] = None
    purchase_amount: Optional[Decimal] = None
    purchase_shares: Optional[Decimal] = None
    purchase_date: Optional[date] = None
    remarks: Optional[str] = None


class HoldingService:
    """
    Service for adding, editing and removing holdings.

    Market fields are never set here; they belong to the refresh pipeline.
    """

    def __init__(
        self,
        repository: HoldingRepository,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._repository = repository
        self._on_change = on_change

    def list_holdings(self) -> list[Holding]:
        return self._repository.list_all()

    def get_holding(self, holding_id: str) -> Holding:
        holding = self._repository.get_by_id(holding_id)
        if holding is None:
            raise NotFoundError("Holding", holding_id)
        return holding

    def add_holding(self, data: HoldingCreate) -> Holding:
        """Validate and persist a new holding."""
        holding = Holding(
            holding_id=str(uuid.uuid4()),
            client_name=data.client_name.strip(),
            client_id=data.client_id.strip(),
            fund_code=data.fund_code.strip(),
            purchase_amount=data.purchase_amount,
            purchase_shares=data.purchase_shares,
            purchase_date=data.purchase_date,
            remarks=data.remarks,
        )
        self._validate(holding)
        created = self._repository.create(holding)
        logger.info("Added holding %s (%s, %s)", created.holding_id, created.client_name, created.fund_code)
        self._changed()
        return created

    def update_holding(self, holding_id: str, data: HoldingUpdate) -> Holding:
        """
        Apply a partial edit and save it.

        Fields left as None keep their stored value. Market data is never
        touched here, so an edit cannot undo a refresh.
        """
        holding = self.get_holding(holding_id)
        changes = {name: value for name, value in vars(data).items() if value is not None}
        for name in ("client_name", "client_id", "fund_code"):
            if name in changes:
                changes[name] = changes[name].strip()
        edited = replace(holding, **changes)
        self._validate(edited)
        saved = self._repository.update(edited)
        logger.info("Updated holding %s", holding_id)
        self._changed()
        return saved

    def delete_holding(self, holding_id: str) -> None:
        self.get_holding(holding_id)
        self._repository.delete(holding_id)
        logger.info("Deleted holding %s", holding_id)
        self._changed()

    def toggle_pin(self, holding_id: str) -> Holding:
        """Pin or unpin a holding; pinned holdings list first."""
        holding = self.get_holding(holding_id)
        pinned = not holding.is_pinned
        saved = self._repository.update(
            replace(
                holding,
                is_pinned=pinned,
                pinned_at=now_market().replace(tzinfo=None) if pinned else None,
            )
        )
        self._changed()
        return saved

    def client_groups(self) -> list[ClientGroup]:
        """
        Holdings grouped by client name, groups sorted by name.

        Within a group pinned holdings come first (most recently pinned
        first), then the rest by purchase date.
        """
        by_client: dict[str, list[Holding]] = defaultdict(list)
        for holding in self._repository.list_all():
            by_client[holding.client_name].append(holding)

        groups = []
        for client_name, holdings in by_client.items():
            pinned = sorted(
                (h for h in holdings if h.is_pinned),
                key=lambda h: h.pinned_at or datetime.min,
                reverse=True,
            )
            unpinned = sorted((h for h in holdings if not h.is_pinned), key=lambda h: h.purchase_date)
            groups.append(
                ClientGroup(
                    client_name=client_name,
                    client_id=next((h.client_id for h in holdings if h.client_id), ""),
                    total_aum=sum((h.total_value for h in holdings), Decimal("0")),
                    holdings=pinned + unpinned,
                )
            )
        groups.sort(key=lambda g: g.client_name.casefold())
        return groups

    @staticmethod
    def _validate(holding: Holding) -> None:
        if holding.is_complete:
            return
        if not holding.client_name.strip():
            raise ValidationError("Client name is required")
        if not holding.fund_code.strip():
            raise ValidationError("Fund code is required")
        if holding.purchase_amount <= 0:
            raise ValidationError("Purchase amount must be positive")
        if holding.purchase_shares <= 0:
            raise ValidationError("Purchase shares must be positive")

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
