"""
Pydantic schemas for trading API request/response validation.

These schemas enforce input validation and define the API contract.
Field names are snake_case in Python and camelCase on the wire.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.trading.entities import MONEY_PLACES

TICKER_DESCRIPTION = "Instrument ticker symbol (case-insensitive)"
TICKER_PATTERN = r"^[A-Za-z0-9.\-]+$"
TICKER_MIN_LEN = 1
TICKER_MAX_LEN = 20
MIN_QUANTITY = Decimal("0.0001")


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, snake_case names accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------


class PlaceOrderRequest(ApiModel):
    """Request schema for order placement.

    Attributes:
        ticker: Instrument ticker, any case.
        side: BUY or SELL, sent as ``type``.
        quantity: Units to trade (at least 0.0001, at most 8 decimals).
        price: Price per unit, not negative, at most 8 decimals.
        order_type: MARKET (default), LIMIT or STOP.
    """

    ticker: str = Field(
        ...,
        min_length=TICKER_MIN_LEN,
        max_length=TICKER_MAX_LEN,
        pattern=TICKER_PATTERN,
        description=TICKER_DESCRIPTION,
    )
    side: Literal["BUY", "SELL"] = Field(..., alias="type")
    quantity: Decimal = Field(
        ..., ge=MIN_QUANTITY, decimal_places=MONEY_PLACES, description="Units to trade"
    )
    price: Decimal = Field(
        ..., ge=0, decimal_places=MONEY_PLACES, description="Price per unit"
    )
    order_type: Literal["MARKET", "LIMIT", "STOP"] = Field(default="MARKET")


class OrderSchema(ApiModel):
    """A single order in the response."""

    id: UUID
    ticker: str
    type: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    order_type: str
    status: str
    filled_quantity: Decimal
    average_fill_price: Decimal
    fee: Decimal
    commission: Decimal
    executed_at: Optional[datetime] = None
    created_at: datetime


class OrderResponse(ApiModel):
    """Response schema wrapping one order."""

    order: OrderSchema


class PaginationSchema(ApiModel):
    total: int
    limit: int
    offset: int


class OrderListResponse(ApiModel):
    """Response schema for order history."""

    orders: list[OrderSchema]
    pagination: PaginationSchema


class TransactionListResponse(ApiModel):
    """Response schema for portfolio transactions."""

    transactions: list[OrderSchema]
    pagination: PaginationSchema


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


class HoldingSchema(ApiModel):
    """A single holding in the response."""

    ticker: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    total_value: Decimal
    gain_loss: Decimal
    gain_loss_percent: Decimal
    last_updated: Optional[datetime] = None


class PortfolioSchema(ApiModel):
    """Portfolio overview."""

    id: UUID
    cash: Decimal
    total_value: Decimal
    invested_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    holdings_count: int
    holdings: list[HoldingSchema]


class PortfolioResponse(ApiModel):
    portfolio: PortfolioSchema


class HoldingsResponse(ApiModel):
    holdings: list[HoldingSchema]
    count: int


class MetricsSchema(ApiModel):
    """Derived portfolio analytics."""

    total_value: Decimal
    cash: Decimal
    invested_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    allocation: dict[str, Decimal]
    top_gainers: list[HoldingSchema]
    top_losers: list[HoldingSchema]


class MetricsResponse(ApiModel):
    metrics: MetricsSchema


# ------------------------------------------------------------------
# Stock catalog
# ------------------------------------------------------------------


class StockSchema(ApiModel):
    """A catalog entry in the response."""

    ticker: str
    name: str
    type: str
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


class StockResponse(ApiModel):
    stock: StockSchema


class StockSearchResponse(ApiModel):
    results: list[StockSchema]
    count: int


# ------------------------------------------------------------------
# Shared
# ------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    code: str
    message: str
    details: list[dict[str, str]] | None = None
