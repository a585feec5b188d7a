"""
Adapter: SQL unit of work.

Implements TradingUnitOfWork port. One connection and one transaction
per unit; the portfolio update and the order insert of a trade either
both commit or both roll back.
"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from app.domain.trading.errors import CommitOutcomeUnknownError
from app.domain.trading.ports import TradingUnitOfWork
from app.infrastructure.trading.order_repository import OrderRepositoryAdapter
from app.infrastructure.trading.portfolio_repository import (
    PortfolioRepositoryAdapter,
)
from app.infrastructure.trading.stock_catalog_repository import SqlStockCatalog

logger = logging.getLogger(__name__)


class SqlTradingUnitOfWork(TradingUnitOfWork):
    """Binds the trading repositories to a single database transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._connection = None
        self._transaction = None

    def __enter__(self) -> "SqlTradingUnitOfWork":
        self._connection = self._engine.connect()
        self._transaction = self._connection.begin()
        self.stocks = SqlStockCatalog(self._connection)
        self.portfolios = PortfolioRepositoryAdapter(self._connection)
        self.orders = OrderRepositoryAdapter(self._connection)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._connection.close()
            self._connection = None
            self._transaction = None

    def commit(self) -> None:
        """Commit the transaction.

        Raises:
            CommitOutcomeUnknownError: If the database errored during
                commit; the writes may or may not be durable.
        """
        try:
            self._transaction.commit()
        except DBAPIError as exc:
            logger.error("Commit failed, outcome unknown: %s", exc.orig)
            raise CommitOutcomeUnknownError(type(exc.orig).__name__) from exc

    def rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            self._transaction.rollback()
