"""View models for per-client summaries."""

from dataclasses import dataclass, field
from decimal import Decimal

from fund_tracker.domain.models import Holding


@dataclass(frozen=True)
class ClientGroup:
    """All holdings of one client with their combined market value."""

    client_name: str
    client_id: str
    total_aum: Decimal
    holdings: list[Holding] = field(default_factory=list)
