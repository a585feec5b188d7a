"""
Adapter: Portfolio persistence.

Implements PortfolioRepository port on the ``portfolios`` and
``holdings`` tables. Saves are guarded by the portfolio's version
column: an UPDATE that matches no row at the expected version means
someone else wrote first.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from app.domain.trading.entities import Holding, Portfolio, utcnow
from app.domain.trading.errors import (
    ConcurrentModificationError,
    DuplicatePortfolioError,
)
from app.domain.trading.ports import PortfolioRepository
from app.infrastructure.trading.tables import holdings, portfolios

logger = logging.getLogger(__name__)


class PortfolioRepositoryAdapter(PortfolioRepository):
    """Concrete adapter for portfolio data persistence.

    Implements the PortfolioRepository port defined in the domain layer.
    Operates on the connection owned by the enclosing unit of work.
    """

    def __init__(self, connection: Connection) -> None:
        self._conn = connection

    def get_by_owner(
        self, owner_id: UUID, for_update: bool = False
    ) -> Optional[Portfolio]:
        """Return the owner's portfolio, or None if not found.

        Args:
            owner_id: UUID of the portfolio owner.
            for_update: Take a row lock (``SELECT ... FOR UPDATE``) on
                databases that support it.

        Returns:
            Portfolio entity with holdings, or None.
        """
        stmt = select(portfolios).where(portfolios.c.owner_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = self._conn.execute(stmt).first()
        if row is None:
            return None

        holding_rows = self._conn.execute(
            select(holdings)
            .where(holdings.c.portfolio_id == row.id)
            .order_by(holdings.c.ticker)
        ).fetchall()

        return Portfolio(
            id=row.id,
            owner_id=row.owner_id,
            cash=row.cash,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
            holdings={
                h.ticker: Holding(
                    ticker=h.ticker,
                    quantity=h.quantity,
                    average_cost=h.average_cost,
                    current_price=h.current_price,
                    last_updated=h.last_updated,
                )
                for h in holding_rows
            },
        )

    def add(self, portfolio: Portfolio) -> None:
        """Insert a new portfolio and its holdings.

        Raises:
            DuplicatePortfolioError: If the owner already has a portfolio.
        """
        try:
            self._conn.execute(
                portfolios.insert().values(
                    id=portfolio.id,
                    owner_id=portfolio.owner_id,
                    cash=portfolio.cash,
                    total_value=portfolio.total_value,
                    version=portfolio.version,
                    created_at=portfolio.created_at or utcnow(),
                    updated_at=portfolio.updated_at,
                )
            )
        except IntegrityError as exc:
            raise DuplicatePortfolioError(str(portfolio.owner_id)) from exc
        self._write_holdings(portfolio)

    def save(self, portfolio: Portfolio) -> None:
        """Persist cash, holdings and total value, bumping the version.

        Raises:
            ConcurrentModificationError: If the stored version moved on.
        """
        result = self._conn.execute(
            portfolios.update()
            .where(
                portfolios.c.id == portfolio.id,
                portfolios.c.version == portfolio.version,
            )
            .values(
                cash=portfolio.cash,
                total_value=portfolio.total_value,
                version=portfolio.version + 1,
                updated_at=portfolio.updated_at or utcnow(),
            )
        )
        if result.rowcount != 1:
            logger.warning(
                "Stale write on portfolio %s at version %d",
                portfolio.id,
                portfolio.version,
            )
            raise ConcurrentModificationError(str(portfolio.id))

        self._conn.execute(
            holdings.delete().where(holdings.c.portfolio_id == portfolio.id)
        )
        self._write_holdings(portfolio)
        portfolio.version += 1

    def _write_holdings(self, portfolio: Portfolio) -> None:
        if not portfolio.holdings:
            return
        self._conn.execute(
            holdings.insert(),
            [
                {
                    "portfolio_id": portfolio.id,
                    "ticker": h.ticker,
                    "quantity": h.quantity,
                    "average_cost": h.average_cost,
                    "current_price": h.current_price,
                    "last_updated": h.last_updated,
                }
                for h in portfolio.holdings.values()
            ],
        )
