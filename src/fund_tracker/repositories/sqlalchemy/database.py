"""Engine and session setup for the holdings store."""

import logging
from typing import Generator, Optional

from sqlalchemy import create_engine, Engine, StaticPool
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from fund_tracker.config.settings import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str) -> Engine:
    """
    Create an engine suited to the database behind `url`.

    Refresh runs write from a worker thread, so SQLite connections must be
    usable across threads. An in-memory SQLite database only exists per
    connection, so it is pinned to a single shared connection.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    options = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


class _Database:
    """Lazily built engine and session factory for the configured URL."""

    def __init__(self):
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(get_settings().get_database_url())
            logger.debug("Opened database %s", self._engine.url.render_as_string(hide_password=True))
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._session_factory

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


_database = _Database()


def get_engine() -> Engine:
    return _database.engine


def get_session_factory() -> sessionmaker:
    """Session factory bound to the configured engine."""
    return _database.session_factory


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the holdings table if it does not exist yet."""
    from fund_tracker.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def reset_database() -> None:
    """Drop the cached engine so the next use reads the current settings."""
    _database.dispose()
