"""
Use case: Open the single portfolio a user trades from.

Input: OpenPortfolioCommand (owner_id, initial_cash?)
Output: PortfolioResult
Side effects: Inserts one Portfolio.
Failure cases: ValidationError (negative cash), DuplicatePortfolioError.
"""

import logging
from decimal import Decimal
from typing import Callable

from app.application.trading.dtos import OpenPortfolioCommand, PortfolioResult
from app.application.trading.mappers import to_portfolio_result
from app.domain.trading.entities import (
    MONEY_PLACES,
    Portfolio,
    fits_money_scale,
    utcnow,
)
from app.domain.trading.errors import DuplicatePortfolioError, ValidationError
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)

STARTING_CASH = Decimal("10000")


class OpenPortfolioUseCase:
    """Creates a user's portfolio with its starting cash balance."""

    def __init__(
        self,
        uow_factory: Callable[[], TradingUnitOfWork],
        starting_cash: Decimal = STARTING_CASH,
    ) -> None:
        self._uow_factory = uow_factory
        self._starting_cash = starting_cash

    def execute(self, command: OpenPortfolioCommand) -> PortfolioResult:
        """Run the open-portfolio use case.

        Raises:
            ValidationError: If the initial cash is negative or does not fit
                the stored scale.
            DuplicatePortfolioError: If the owner already has a portfolio.
        """
        cash = (
            self._starting_cash
            if command.initial_cash is None
            else command.initial_cash
        )
        if not fits_money_scale(cash):
            raise ValidationError(
                "initial_cash", f"must have at most {MONEY_PLACES} decimal places"
            )
        if cash < 0:
            raise ValidationError("initial_cash", "must not be negative")

        with self._uow_factory() as uow:
            if uow.portfolios.get_by_owner(command.owner_id) is not None:
                raise DuplicatePortfolioError(str(command.owner_id))

            now = utcnow()
            portfolio = Portfolio(
                owner_id=command.owner_id,
                cash=cash,
                created_at=now,
                updated_at=now,
            )
            uow.portfolios.add(portfolio)
            uow.commit()

        logger.info(
            "Opened portfolio %s for owner=%s with cash=%s",
            portfolio.id,
            command.owner_id,
            cash,
        )
        return to_portfolio_result(portfolio)
