"""
Engine construction and schema bootstrap for the trading store.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.infrastructure.trading.tables import metadata

logger = logging.getLogger(__name__)

_IN_MEMORY_SQLITE = ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str) -> Engine:
    """Build a SQLAlchemy engine for a database URL.

    SQLite URLs get thread-sharing enabled, and in-memory SQLite keeps a
    single connection so every session sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in _IN_MEMORY_SQLITE:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create any missing trading tables."""
    metadata.create_all(engine)
    logger.info("Trading schema verified on %s", engine.url.render_as_string(hide_password=True))
