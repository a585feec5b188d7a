"""
Use case: Cancel one of the caller's orders.

Input: CancelOrderCommand (owner_id, order_id)
Output: OrderResult with status CANCELLED
Side effects: Updates the order status. The portfolio is not touched.
Failure cases: OrderNotFoundError, InvalidStateError.
"""

import logging
from typing import Callable

from app.application.trading.dtos import CancelOrderCommand, OrderResult
from app.application.trading.mappers import to_order_result
from app.domain.trading.errors import OrderNotFoundError
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)


class CancelOrderUseCase:
    """Moves a PENDING or PARTIALLY_FILLED order to CANCELLED.

    Orders fill at placement, so in practice every stored order is
    FILLED and this always ends in InvalidStateError.
    """

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, command: CancelOrderCommand) -> OrderResult:
        """Run the cancel use case.

        Raises:
            OrderNotFoundError: Unknown order, or owned by someone else.
            InvalidStateError: Order is not in a cancellable status.
        """
        logger.info(
            "Cancelling order=%s for owner=%s", command.order_id, command.owner_id
        )

        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(command.order_id)
            if order is None or order.owner_id != command.owner_id:
                raise OrderNotFoundError(str(command.order_id))

            order.cancel()
            uow.orders.save(order)
            uow.commit()

        return to_order_result(order)
