"""
Use case: Page through the caller's order ledger.

Input: ListOrdersQuery (owner_id, status?, side?, limit, offset)
Output: OrderPage
Side effects: None.
Failure cases: ValidationError (unknown status/side, bad paging).
"""

import logging
from typing import Callable

from app.application.trading.dtos import ListOrdersQuery, OrderPage
from app.application.trading.mappers import to_order_result
from app.domain.trading.entities import OrderSide, OrderStatus
from app.domain.trading.errors import ValidationError
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ListOrdersUseCase:
    """Returns orders newest first with pagination totals.

    Serves both the order history and the portfolio transactions views.
    """

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, query: ListOrdersQuery) -> OrderPage:
        if not 1 <= query.limit <= MAX_PAGE_SIZE:
            raise ValidationError("limit", f"must be between 1 and {MAX_PAGE_SIZE}")
        if query.offset < 0:
            raise ValidationError("offset", "must not be negative")

        status = None
        if query.status:
            try:
                status = OrderStatus(query.status.upper())
            except ValueError:
                raise ValidationError("status", "unknown order status") from None

        side = None
        if query.side:
            try:
                side = OrderSide(query.side.upper())
            except ValueError:
                raise ValidationError("type", "must be BUY or SELL") from None

        logger.info(
            "Listing orders owner=%s status=%s side=%s limit=%d offset=%d",
            query.owner_id,
            status.value if status else None,
            side.value if side else None,
            query.limit,
            query.offset,
        )

        with self._uow_factory() as uow:
            orders = uow.orders.list_by_owner(
                query.owner_id,
                status=status,
                side=side,
                limit=query.limit,
                offset=query.offset,
            )
            total = uow.orders.count_by_owner(query.owner_id, status=status, side=side)

        return OrderPage(
            orders=[to_order_result(o) for o in orders],
            total=total,
            limit=query.limit,
            offset=query.offset,
        )
