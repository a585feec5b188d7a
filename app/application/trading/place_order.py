"""
Use case: Place a buy or sell order and reconcile the portfolio.

Input: PlaceOrderCommand (owner, ticker, side, quantity, price, order type)
Output: OrderResult (always FILLED; orders fill at placement)
Side effects: Updates exactly one Portfolio and inserts exactly one Order,
    committed together in a single unit of work.
Failure cases: ValidationError, StockNotFoundError, PortfolioNotFoundError,
    InsufficientFundsError, InsufficientHoldingsError,
    ConcurrentModificationError (after retries), CommitOutcomeUnknownError.
"""

import logging
from decimal import Decimal
from typing import Callable

from app.application.trading.dtos import OrderResult, PlaceOrderCommand
from app.application.trading.mappers import to_order_result
from app.domain.trading.entities import OrderSide, OrderType
from app.domain.trading.errors import (
    ConcurrentModificationError,
    PortfolioNotFoundError,
    StockNotFoundError,
    ValidationError,
)
from app.domain.trading.order_engine import (
    FEE_RATE,
    execute_order,
    validate_order_fields,
)
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


def parse_side(value: str) -> OrderSide:
    try:
        return OrderSide((value or "").upper())
    except ValueError:
        raise ValidationError("type", "must be BUY or SELL") from None


def parse_order_type(value: str | None) -> OrderType:
    if not value:
        return OrderType.MARKET
    try:
        return OrderType(value.upper())
    except ValueError:
        raise ValidationError("orderType", "must be MARKET, LIMIT, or STOP") from None


class PlaceOrderUseCase:
    """Orchestrates order placement against the caller's portfolio.

    Each attempt runs in a fresh unit of work: read the stock and the
    portfolio, apply the fill, save the portfolio with a version check,
    insert the order, commit. A version conflict means another request
    changed the portfolio first; nothing was written, so the whole
    attempt is replayed on fresh state.
    """

    def __init__(
        self,
        uow_factory: Callable[[], TradingUnitOfWork],
        fee_rate: Decimal = FEE_RATE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._fee_rate = fee_rate
        self._max_attempts = max(1, max_attempts)

    def execute(self, command: PlaceOrderCommand) -> OrderResult:
        """Run the order placement use case.

        Args:
            command: The order request.

        Returns:
            The filled order.

        Raises:
            ValidationError: Malformed ticker, side, type, quantity or price.
            StockNotFoundError: Ticker not in the catalog.
            PortfolioNotFoundError: Caller has no portfolio.
            InsufficientFundsError: BUY exceeds available cash.
            InsufficientHoldingsError: SELL exceeds held quantity.
            ConcurrentModificationError: Conflicts persisted past the retry limit.
            CommitOutcomeUnknownError: The store failed during commit.
        """
        ticker = validate_order_fields(command.ticker, command.quantity, command.price)
        side = parse_side(command.side)
        order_type = parse_order_type(command.order_type)

        logger.info(
            "Placing %s order owner=%s ticker=%s quantity=%s price=%s",
            side.value,
            command.owner_id,
            ticker,
            command.quantity,
            command.price,
        )

        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._attempt(command, ticker, side, order_type)
            except ConcurrentModificationError as exc:
                if attempt == self._max_attempts:
                    logger.error(
                        "Giving up on order for owner=%s after %d conflicting attempts",
                        command.owner_id,
                        attempt,
                    )
                    raise
                logger.warning(
                    "Retrying order for owner=%s (attempt %d/%d): %s",
                    command.owner_id,
                    attempt,
                    self._max_attempts,
                    exc.message,
                )
        raise AssertionError("unreachable")

    def _attempt(
        self,
        command: PlaceOrderCommand,
        ticker: str,
        side: OrderSide,
        order_type: OrderType,
    ) -> OrderResult:
        with self._uow_factory() as uow:
            stock = uow.stocks.get_by_ticker(ticker)
            if stock is None:
                raise StockNotFoundError(ticker)

            portfolio = uow.portfolios.get_by_owner(command.owner_id, for_update=True)
            if portfolio is None:
                raise PortfolioNotFoundError(str(command.owner_id))

            order = execute_order(
                portfolio,
                stock,
                side,
                command.quantity,
                command.price,
                order_type=order_type,
                fee_rate=self._fee_rate,
            )

            uow.portfolios.save(portfolio)
            uow.orders.add(order)
            uow.commit()

        logger.info(
            "Order %s filled: %s %s x%s, cash now %s",
            order.id,
            side.value,
            ticker,
            order.quantity,
            portfolio.cash,
        )
        return to_order_result(order)
