"""
Data Transfer Objects for the trading application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID


# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------


@dataclass(frozen=True)
class PlaceOrderCommand:
    """Input DTO for placing a buy or sell order.

    Attributes:
        owner_id: Authenticated caller.
        ticker: Instrument ticker, any case.
        side: "BUY" or "SELL".
        quantity: Units to trade.
        price: Price per unit.
        order_type: "MARKET", "LIMIT" or "STOP".
    """

    owner_id: UUID
    ticker: str
    side: str
    quantity: Decimal
    price: Decimal
    order_type: str = "MARKET"


@dataclass(frozen=True)
class CancelOrderCommand:
    """Input DTO for cancelling an order.

    Attributes:
        owner_id: Authenticated caller; must own the order.
        order_id: Order to cancel.
    """

    owner_id: UUID
    order_id: UUID


@dataclass(frozen=True)
class ListOrdersQuery:
    """Input DTO for paging through the order ledger.

    Attributes:
        owner_id: Authenticated caller.
        status: Optional status filter.
        side: Optional BUY/SELL filter.
        limit: Page size (1-100).
        offset: Rows to skip.
    """

    owner_id: UUID
    status: Optional[str] = None
    side: Optional[str] = None
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class OrderResult:
    """Output DTO for a single order."""

    id: UUID
    owner_id: UUID
    ticker: str
    side: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    order_type: str
    status: str
    filled_quantity: Decimal
    average_fill_price: Decimal
    fee: Decimal
    commission: Decimal
    executed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class OrderPage:
    """Output DTO for a page of orders.

    Attributes:
        orders: Orders on this page, newest first.
        total: Number of orders matching the filters.
        limit: Page size requested.
        offset: Rows skipped.
    """

    orders: list[OrderResult]
    total: int
    limit: int
    offset: int


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


@dataclass(frozen=True)
class OwnerQuery:
    """Input DTO for any read scoped to the caller's portfolio."""

    owner_id: UUID


@dataclass(frozen=True)
class OpenPortfolioCommand:
    """Input DTO for opening a user's portfolio.

    Attributes:
        owner_id: User the portfolio belongs to.
        initial_cash: Starting cash. Defaults to the configured amount.
    """

    owner_id: UUID
    initial_cash: Optional[Decimal] = None


@dataclass(frozen=True)
class HoldingResult:
    """Output DTO for a single holding."""

    ticker: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    total_value: Decimal
    gain_loss: Decimal
    gain_loss_percent: Decimal
    last_updated: Optional[datetime]


@dataclass(frozen=True)
class PortfolioResult:
    """Output DTO for the portfolio overview."""

    id: UUID
    owner_id: UUID
    cash: Decimal
    total_value: Decimal
    invested_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    holdings: list[HoldingResult] = field(default_factory=list)

    @property
    def holdings_count(self) -> int:
        return len(self.holdings)


@dataclass(frozen=True)
class MetricsResult:
    """Output DTO for portfolio metrics."""

    total_value: Decimal
    cash: Decimal
    invested_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    allocation: dict[str, Decimal]
    top_gainers: list[HoldingResult]
    top_losers: list[HoldingResult]


# ------------------------------------------------------------------
# Stock catalog
# ------------------------------------------------------------------


@dataclass(frozen=True)
class SearchStocksQuery:
    """Input DTO for catalog search.

    Attributes:
        query: Substring matched against ticker and name.
        asset_type: Optional CRYPTO/STOCK/COMMODITY filter.
        limit: Maximum results.
    """

    query: str
    asset_type: Optional[str] = None
    limit: int = 10


@dataclass(frozen=True)
class StockResult:
    """Output DTO for a catalog entry."""

    ticker: str
    name: str
    asset_type: str
    current_price: Decimal
    previous_close: Decimal
    day_high: Decimal
    day_low: Decimal
    volume: Decimal
    currency: str
    change: Decimal
    change_percent: Decimal
    exchange: Optional[str] = None
    market_cap: Optional[Decimal] = None
    last_updated: Optional[datetime] = None
