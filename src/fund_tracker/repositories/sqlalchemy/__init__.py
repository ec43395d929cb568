"""SQLAlchemy repository implementations."""

from fund_tracker.repositories.sqlalchemy.database import (
    build_engine,
    get_engine,
    get_session_factory,
    get_db,
    init_db,
    reset_database,
    Base,
)
from fund_tracker.repositories.sqlalchemy.holding_repo import (
    SqlAlchemyHoldingRepository,
    holding_repository_scope,
)

__all__ = [
    "build_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyHoldingRepository",
    "holding_repository_scope",
]
