"""
Domain entities for the trading bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from app.domain.trading.errors import InvalidStateError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Every stored amount (cash, quantity, price, cost, fee) has this many
# fractional digits.
MONEY_PLACES = 8
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)
MONEY_LIMIT = Decimal(10) ** 16


def quantize_money(value: Decimal) -> Decimal:
    """Round an amount to the stored scale."""
    return value.quantize(MONEY_QUANTUM)


def fits_money_scale(value: Decimal) -> bool:
    """True when ``value`` can be stored without rounding or overflow."""
    if not value.is_finite() or abs(value) >= MONEY_LIMIT:
        return False
    return value == quantize_money(value)


def utcnow() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(timezone.utc)


class AssetType(Enum):
    """Kind of tradable instrument in the catalog."""

    CRYPTO = "CRYPTO"
    STOCK = "STOCK"
    COMMODITY = "COMMODITY"


class OrderSide(Enum):
    """Direction of an order."""

    BUY = "BUY"
    SELL = "SELL"


class OrderType(Enum):
    """Order type as submitted by the client."""

    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP = "STOP"


class OrderStatus(Enum):
    """Lifecycle status of an order."""

    PENDING = "PENDING"
    FILLED = "FILLED"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PARTIALLY_FILLED})


@dataclass(frozen=True)
class Stock:
    """A catalog entry for a tradable instrument."""

    ticker: str
    name: str
    asset_type: AssetType
    current_price: Decimal
    previous_close: Decimal
    day_high: Decimal
    day_low: Decimal
    volume: Decimal = ZERO
    currency: str = "USD"
    exchange: Optional[str] = None
    market_cap: Optional[Decimal] = None
    last_updated: Optional[datetime] = None

    @property
    def change(self) -> Decimal:
        """Absolute move since the previous close."""
        return self.current_price - self.previous_close

    @property
    def change_percent(self) -> Decimal:
        """Percentage move since the previous close."""
        if self.previous_close == 0:
            return ZERO
        return self.change / self.previous_close * HUNDRED


@dataclass
class Holding:
    """A position in one ticker inside a portfolio.

    Valuation fields are derived from quantity, average cost and the
    last-known price, so they can never drift from each other.
    """

    ticker: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    last_updated: Optional[datetime] = None

    @property
    def total_value(self) -> Decimal:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.average_cost

    @property
    def gain_loss(self) -> Decimal:
        return self.total_value - self.cost_basis

    @property
    def gain_loss_percent(self) -> Decimal:
        basis = self.cost_basis
        if basis == 0:
            return ZERO
        return self.gain_loss / basis * HUNDRED

    def add_lot(self, quantity: Decimal, price: Decimal) -> None:
        """Merge a newly bought lot using weighted-average cost."""
        new_quantity = self.quantity + quantity
        self.average_cost = quantize_money(
            (self.average_cost * self.quantity + price * quantity) / new_quantity
        )
        self.quantity = new_quantity
        self.last_updated = utcnow()


@dataclass
class Portfolio:
    """A user's simulated account: cash plus per-ticker holdings.

    ``version`` is the optimistic-concurrency counter. Repositories bump it
    on every successful save and refuse saves made from a stale copy.
    """

    owner_id: UUID
    cash: Decimal
    holdings: dict[str, Holding] = field(default_factory=dict)
    id: UUID = field(default_factory=uuid4)
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def invested_value(self) -> Decimal:
        return sum((h.total_value for h in self.holdings.values()), ZERO)

    @property
    def total_value(self) -> Decimal:
        """Cash plus the last-known value of every holding."""
        return self.cash + self.invested_value

    @property
    def total_gain_loss(self) -> Decimal:
        return sum((h.gain_loss for h in self.holdings.values()), ZERO)

    @property
    def total_gain_loss_percent(self) -> Decimal:
        invested = self.invested_value
        if invested == 0:
            return ZERO
        return self.total_gain_loss / invested * HUNDRED

    def holding(self, ticker: str) -> Optional[Holding]:
        return self.holdings.get(ticker)


@dataclass
class Order:
    """A trade request and its fill outcome."""

    owner_id: UUID
    ticker: str
    side: OrderSide
    quantity: Decimal
    price: Decimal
    total: Decimal
    fee: Decimal
    order_type: OrderType = OrderType.MARKET
    status: OrderStatus = OrderStatus.PENDING
    filled_quantity: Decimal = ZERO
    average_fill_price: Decimal = ZERO
    commission: Decimal = ZERO
    executed_at: Optional[datetime] = None
    notes: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def mark_filled(self, when: Optional[datetime] = None) -> None:
        """Record a complete fill at the submitted price."""
        self.status = OrderStatus.FILLED
        self.filled_quantity = self.quantity
        self.average_fill_price = self.price
        self.executed_at = when or utcnow()
        self.updated_at = self.executed_at

    def cancel(self) -> None:
        """Move the order to CANCELLED.

        Raises:
            InvalidStateError: If the order is not PENDING or PARTIALLY_FILLED.
        """
        if self.status not in CANCELLABLE_STATUSES:
            raise InvalidStateError(str(self.id), self.status.value)
        self.status = OrderStatus.CANCELLED
        self.updated_at = utcnow()
