"""
Order fill rules for the simulated broker.

Applies a buy or sell to an in-memory Portfolio and produces the
matching Order. There is no matching engine: every accepted order
fills immediately and completely at the submitted price, whatever its
order type.

Pure domain logic. Persistence and transactions are the caller's job.
"""

import logging
from decimal import Decimal

from app.domain.trading.entities import (
    MONEY_LIMIT,
    MONEY_PLACES,
    Holding,
    Order,
    OrderSide,
    OrderType,
    Portfolio,
    Stock,
    fits_money_scale,
    quantize_money,
    utcnow,
)
from app.domain.trading.errors import (
    InsufficientFundsError,
    InsufficientHoldingsError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FEE_RATE = Decimal("0.001")


def validate_order_fields(ticker: str, quantity: Decimal, price: Decimal) -> str:
    """Check the raw order fields and return the normalized ticker.

    Raises:
        ValidationError: If the ticker is blank, quantity is not positive,
            price is negative, or either amount is not a finite number
            with at most ``MONEY_PLACES`` decimal places.
    """
    normalized = (ticker or "").strip().upper()
    if not normalized:
        raise ValidationError("ticker", "must not be empty")
    _check_amount("quantity", quantity)
    if quantity <= 0:
        raise ValidationError("quantity", "must be greater than 0")
    _check_amount("price", price)
    if price < 0:
        raise ValidationError("price", "must not be negative")
    return normalized


def _check_amount(name: str, value: Decimal) -> None:
    if value is None or not value.is_finite():
        raise ValidationError(name, "must be a finite number")
    if not fits_money_scale(value):
        raise ValidationError(
            name, f"must have at most {MONEY_PLACES} decimal places and fit the ledger"
        )


def compute_fee(total: Decimal, fee_rate: Decimal = FEE_RATE) -> Decimal:
    """Proportional trading fee charged on both sides, at the stored scale."""
    return quantize_money(total * fee_rate)


def execute_order(
    portfolio: Portfolio,
    stock: Stock,
    side: OrderSide,
    quantity: Decimal,
    price: Decimal,
    order_type: OrderType = OrderType.MARKET,
    fee_rate: Decimal = FEE_RATE,
) -> Order:
    """Fill an order against a portfolio and return the FILLED order.

    The portfolio is only mutated once every check has passed, so a
    raised error leaves it exactly as it was.

    Args:
        portfolio: The owner's portfolio, mutated in place on success.
        stock: Catalog entry for the traded ticker.
        side: BUY or SELL.
        quantity: Units to trade, strictly positive.
        price: Execution price per unit, not negative.
        order_type: Recorded on the order; does not change the fill.
        fee_rate: Proportional fee applied to the order total.

    Returns:
        The filled Order, not yet persisted.

    Raises:
        ValidationError: An amount is malformed or the total overflows.
        InsufficientFundsError: BUY costs more than the available cash.
        InsufficientHoldingsError: SELL exceeds the held quantity.
    """
    ticker = validate_order_fields(stock.ticker, quantity, price)
    total = quantity * price
    if not total.is_finite() or total >= MONEY_LIMIT:
        raise ValidationError("price", "order total is too large")
    total = quantize_money(total)
    fee = compute_fee(total, fee_rate)

    if side is OrderSide.BUY:
        cost = total + fee
        if portfolio.cash < cost:
            raise InsufficientFundsError(str(cost), str(portfolio.cash))

        holding = portfolio.holding(ticker)
        if holding is not None:
            holding.add_lot(quantity, price)
        else:
            portfolio.holdings[ticker] = Holding(
                ticker=ticker,
                quantity=quantity,
                average_cost=price,
                current_price=stock.current_price,
                last_updated=utcnow(),
            )
        portfolio.cash -= cost
    else:
        holding = portfolio.holding(ticker)
        held = holding.quantity if holding is not None else Decimal("0")
        if holding is None or held < quantity:
            raise InsufficientHoldingsError(ticker, str(quantity), str(held))

        holding.quantity -= quantity
        holding.last_updated = utcnow()
        portfolio.cash += total - fee
        if holding.quantity == 0:
            del portfolio.holdings[ticker]

    portfolio.updated_at = utcnow()

    order = Order(
        owner_id=portfolio.owner_id,
        ticker=ticker,
        side=side,
        quantity=quantity,
        price=price,
        total=total,
        fee=fee,
        order_type=order_type,
    )
    order.mark_filled()

    logger.debug(
        "Filled %s %s x%s @ %s (fee=%s, cash=%s)",
        side.value,
        ticker,
        quantity,
        price,
        fee,
        portfolio.cash,
    )
    return order
