"""SQLAlchemy implementation of HoldingRepository."""

import logging
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional

from sqlalchemy.orm import Session, sessionmaker

from fund_tracker.core.exceptions import NotFoundError
from fund_tracker.domain.models import Holding
from fund_tracker.repositories.sqlalchemy.orm_models import HoldingORM

logger = logging.getLogger(__name__)

# Columns written by the refresh pipeline; everything else is user-owned.
_MARKET_FIELDS = (
    "fund_name",
    "current_nav",
    "nav_date",
    "is_valid",
    "nav_return_1m",
    "nav_return_3m",
    "nav_return_6m",
    "nav_return_1y",
)

# Columns a user may edit
_USER_FIELDS = (
    "client_name",
    "client_id",
    "fund_code",
    "purchase_amount",
    "purchase_shares",
    "purchase_date",
    "remarks",
    "is_pinned",
    "pinned_at",
)

_ALL_FIELDS = _USER_FIELDS + _MARKET_FIELDS


class SqlAlchemyHoldingRepository:
    """SQLAlchemy-backed holdings store."""

    def __init__(self, db: Session):
        self._db = db

    def list_all(self) -> list[Holding]:
        """List all holdings, pinned first, then by client and fund code."""
        orm_holdings = (
            self._db.query(HoldingORM)
            .order_by(
                HoldingORM.is_pinned.desc(),
                HoldingORM.client_name,
                HoldingORM.fund_code,
            )
            .all()
        )
        return [self._to_domain(h) for h in orm_holdings]

    def get_by_id(self, holding_id: str) -> Optional[Holding]:
        """Retrieve a holding by ID."""
        orm_holding = self._db.get(HoldingORM, holding_id)
        return self._to_domain(orm_holding) if orm_holding else None

    def create(self, holding: Holding) -> Holding:
        """Persist a new holding."""
        orm_holding = HoldingORM(holding_id=holding.holding_id)
        self._copy_fields(holding, orm_holding, _ALL_FIELDS)
        self._db.add(orm_holding)
        self._db.commit()
        self._db.refresh(orm_holding)
        return self._to_domain(orm_holding)

    def update(self, holding: Holding) -> Holding:
        """Save the user-owned fields of an existing holding; market fields are left alone."""
        orm_holding = self._db.get(HoldingORM, holding.holding_id)
        if orm_holding is None:
            raise NotFoundError("Holding", holding.holding_id)
        self._copy_fields(holding, orm_holding, _USER_FIELDS)
        self._db.commit()
        self._db.refresh(orm_holding)
        return self._to_domain(orm_holding)

    def delete(self, holding_id: str) -> None:
        """Delete a holding."""
        self._db.query(HoldingORM).filter(
            HoldingORM.holding_id == holding_id
        ).delete()
        self._db.commit()

    def apply_updates(self, updated: Mapping[str, Holding]) -> int:
        """Stage refreshed market fields by ID; unknown IDs are skipped."""
        if not updated:
            return 0
        orm_holdings = (
            self._db.query(HoldingORM)
            .filter(HoldingORM.holding_id.in_(list(updated)))
            .all()
        )
        for orm_holding in orm_holdings:
            self._copy_fields(updated[orm_holding.holding_id], orm_holding, _MARKET_FIELDS)

        skipped = len(updated) - len(orm_holdings)
        if skipped:
            logger.info("Skipped %d refreshed holding(s) no longer in the store", skipped)
        return len(orm_holdings)

    def persist(self) -> None:
        """Commit staged changes."""
        self._db.commit()

    @staticmethod
    def _copy_fields(source: Holding, target: HoldingORM, fields: tuple[str, ...]) -> None:
        for name in fields:
            setattr(target, name, getattr(source, name))

    @staticmethod
    def _to_domain(orm: HoldingORM) -> Holding:
        """Convert ORM model to domain model."""
        return Holding(
            holding_id=orm.holding_id,
            client_name=orm.client_name,
            client_id=orm.client_id,
            fund_code=orm.fund_code,
            fund_name=orm.fund_name,
            purchase_amount=orm.purchase_amount,
            purchase_shares=orm.purchase_shares,
            purchase_date=orm.purchase_date,
            remarks=orm.remarks,
            current_nav=orm.current_nav,
            nav_date=orm.nav_date,
            is_valid=orm.is_valid,
            is_pinned=orm.is_pinned,
            pinned_at=orm.pinned_at,
            nav_return_1m=orm.nav_return_1m,
            nav_return_3m=orm.nav_return_3m,
            nav_return_6m=orm.nav_return_6m,
            nav_return_1y=orm.nav_return_1y,
        )


@contextmanager
def holding_repository_scope(session_factory: sessionmaker) -> Iterator[SqlAlchemyHoldingRepository]:
    """Open a session for work outside a request (e.g. a background refresh)."""
    session = session_factory()
    try:
        yield SqlAlchemyHoldingRepository(session)
    finally:
        session.close()
