"""
Builders for catalog entries and portfolios used across the test suite.
"""

import uuid
from decimal import Decimal

from app.domain.trading.entities import AssetType, Portfolio, Stock, utcnow
from app.infrastructure.trading.stock_catalog_repository import SqlStockCatalog
from app.infrastructure.trading.unit_of_work import SqlTradingUnitOfWork


def make_stock(
    ticker: str = "BTC",
    price: str = "100",
    name: str | None = None,
    asset_type: AssetType = AssetType.CRYPTO,
    previous_close: str | None = None,
) -> Stock:
    current = Decimal(price)
    previous = Decimal(previous_close) if previous_close is not None else current
    return Stock(
        ticker=ticker,
        name=name or f"{ticker} Test Asset",
        asset_type=asset_type,
        current_price=current,
        previous_close=previous,
        day_high=max(current, previous),
        day_low=min(current, previous),
        last_updated=utcnow(),
    )


def seed_stock(engine, stock: Stock) -> None:
    with engine.begin() as conn:
        SqlStockCatalog(conn).upsert(stock)


def seed_portfolio(engine, owner_id: uuid.UUID, cash: str = "10000") -> Portfolio:
    portfolio = Portfolio(owner_id=owner_id, cash=Decimal(cash), created_at=utcnow())
    with SqlTradingUnitOfWork(engine) as uow:
        uow.portfolios.add(portfolio)
        uow.commit()
    return portfolio
