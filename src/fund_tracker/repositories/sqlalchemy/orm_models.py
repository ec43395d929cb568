"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Boolean,
    Text,
    Numeric,
)

from fund_tracker.domain.models.holding import DEFAULT_FUND_NAME
from fund_tracker.repositories.sqlalchemy.database import Base


class HoldingORM(Base):
    """SQLAlchemy model for Holding."""

    __tablename__ = "holdings"

    holding_id = Column(String(36), primary_key=True)
    client_name = Column(String(255), nullable=False, index=True)
    client_id = Column(String(64), nullable=False, default="")
    fund_code = Column(String(16), nullable=False, index=True)
    fund_name = Column(String(255), nullable=False, default=DEFAULT_FUND_NAME)
    purchase_amount = Column(Numeric(precision=18, scale=2), nullable=False)
    purchase_shares = Column(Numeric(precision=18, scale=4), nullable=False)
    purchase_date = Column(Date, nullable=False)
    remarks = Column(Text, nullable=False, default="")
    current_nav = Column(Numeric(precision=18, scale=4), nullable=False, default=Decimal("0"))
    nav_date = Column(Date, nullable=True)
    is_valid = Column(Boolean, nullable=False, default=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    pinned_at = Column(DateTime, nullable=True)
    nav_return_1m = Column(Numeric(precision=10, scale=4), nullable=True)
    nav_return_3m = Column(Numeric(precision=10, scale=4), nullable=True)
    nav_return_6m = Column(Numeric(precision=10, scale=4), nullable=True)
    nav_return_1y = Column(Numeric(precision=10, scale=4), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)
