"""
Adapter: Stock catalog.

Implements StockCatalog port on the ``stocks`` table.
The port is read-only; ``upsert`` exists for operator seeding only.
"""

import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Connection, Row

from app.domain.trading.entities import AssetType, Stock
from app.domain.trading.ports import StockCatalog
from app.infrastructure.trading.tables import stocks

logger = logging.getLogger(__name__)


def _to_stock(row: Row) -> Stock:
    return Stock(
        ticker=row.ticker,
        name=row.name,
        asset_type=AssetType(row.asset_type),
        current_price=row.current_price,
        previous_close=row.previous_close,
        day_high=row.day_high,
        day_low=row.day_low,
        volume=row.volume,
        currency=row.currency,
        exchange=row.exchange,
        market_cap=row.market_cap,
        last_updated=row.last_updated,
    )


class SqlStockCatalog(StockCatalog):
    """Reads catalog entries through an open connection."""

    def __init__(self, connection: Connection) -> None:
        self._conn = connection

    def get_by_ticker(self, ticker: str) -> Optional[Stock]:
        row = self._conn.execute(
            select(stocks).where(stocks.c.ticker == ticker.strip().upper())
        ).first()
        return _to_stock(row) if row is not None else None

    def search(
        self,
        query: str,
        asset_type: Optional[AssetType] = None,
        limit: int = 10,
    ) -> list[Stock]:
        needle = query.strip().lower()
        stmt = select(stocks).where(
            or_(
                func.lower(stocks.c.ticker).contains(needle, autoescape=True),
                func.lower(stocks.c.name).contains(needle, autoescape=True),
            )
        )
        if asset_type is not None:
            stmt = stmt.where(stocks.c.asset_type == asset_type.value)
        stmt = stmt.order_by(stocks.c.ticker).limit(limit)

        rows = self._conn.execute(stmt).fetchall()
        logger.debug("Catalog search %r matched %d rows", query, len(rows))
        return [_to_stock(row) for row in rows]

    def upsert(self, stock: Stock) -> None:
        """Insert or replace a catalog entry."""
        values = {
            "name": stock.name,
            "asset_type": stock.asset_type.value,
            "current_price": stock.current_price,
            "previous_close": stock.previous_close,
            "day_high": stock.day_high,
            "day_low": stock.day_low,
            "volume": stock.volume,
            "currency": stock.currency.upper(),
            "exchange": stock.exchange,
            "market_cap": stock.market_cap,
            "last_updated": stock.last_updated,
        }
        ticker = stock.ticker.strip().upper()
        result = self._conn.execute(
            stocks.update().where(stocks.c.ticker == ticker).values(**values)
        )
        if result.rowcount == 0:
            self._conn.execute(stocks.insert().values(ticker=ticker, **values))
