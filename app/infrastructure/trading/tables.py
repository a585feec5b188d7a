"""
SQLAlchemy table definitions for the trading store.

Core tables only; adapters map rows to domain entities themselves.
Money and quantities are fixed-point NUMERIC columns.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
)

from app.domain.trading.entities import MONEY_PLACES

metadata = MetaData()

MONEY = Numeric(24, MONEY_PLACES)

stocks = Table(
    "stocks",
    metadata,
    Column("ticker", String(20), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("asset_type", String(16), nullable=False),
    Column("current_price", MONEY, nullable=False),
    Column("previous_close", MONEY, nullable=False),
    Column("day_high", MONEY, nullable=False),
    Column("day_low", MONEY, nullable=False),
    Column("volume", MONEY, nullable=False, default=0),
    Column("currency", String(8), nullable=False, default="USD"),
    Column("exchange", String(64)),
    Column("market_cap", MONEY),
    Column("last_updated", DateTime(timezone=True)),
    CheckConstraint("current_price >= 0", name="ck_stocks_price_non_negative"),
)

portfolios = Table(
    "portfolios",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("owner_id", Uuid, nullable=False, unique=True),
    Column("cash", MONEY, nullable=False),
    Column("total_value", MONEY, nullable=False),
    Column("version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    CheckConstraint("cash >= 0", name="ck_portfolios_cash_non_negative"),
)

holdings = Table(
    "holdings",
    metadata,
    Column(
        "portfolio_id",
        Uuid,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("ticker", String(20), primary_key=True),
    Column("quantity", MONEY, nullable=False),
    Column("average_cost", MONEY, nullable=False),
    Column("current_price", MONEY, nullable=False),
    Column("last_updated", DateTime(timezone=True)),
    CheckConstraint("quantity >= 0", name="ck_holdings_quantity_non_negative"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("owner_id", Uuid, nullable=False),
    Column("ticker", String(20), nullable=False),
    Column("side", String(4), nullable=False),
    Column("quantity", MONEY, nullable=False),
    Column("price", MONEY, nullable=False),
    Column("total", MONEY, nullable=False),
    Column("order_type", String(8), nullable=False),
    Column("status", String(16), nullable=False),
    Column("filled_quantity", MONEY, nullable=False, default=0),
    Column("average_fill_price", MONEY, nullable=False, default=0),
    Column("fee", MONEY, nullable=False, default=0),
    Column("commission", MONEY, nullable=False, default=0),
    Column("executed_at", DateTime(timezone=True)),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True)),
    CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
    Index("ix_orders_owner_created", "owner_id", "created_at"),
    Index("ix_orders_status", "status"),
)

api_tokens = Table(
    "api_tokens",
    metadata,
    Column("token_hash", String(64), primary_key=True),
    Column("owner_id", Uuid, nullable=False, index=True),
    Column("label", String(128)),
    Column("created_at", DateTime(timezone=True)),
)
