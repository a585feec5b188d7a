"""
Use cases: Read the caller's portfolio overview and holdings.

Input: OwnerQuery (owner_id)
Output: PortfolioResult / list[HoldingResult]
Side effects: None.
Failure cases: PortfolioNotFoundError.
"""

import logging
from typing import Callable

from app.application.trading.dtos import HoldingResult, OwnerQuery, PortfolioResult
from app.application.trading.mappers import to_portfolio_result
from app.domain.trading.errors import PortfolioNotFoundError
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)


class GetPortfolioUseCase:
    """Loads a portfolio and maps it to the overview DTO."""

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, query: OwnerQuery) -> PortfolioResult:
        """Return the overview for the caller's portfolio.

        Raises:
            PortfolioNotFoundError: If the caller has no portfolio.
        """
        logger.info("Loading portfolio for owner=%s", query.owner_id)
        with self._uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(query.owner_id)
        if portfolio is None:
            raise PortfolioNotFoundError(str(query.owner_id))
        return to_portfolio_result(portfolio)


class GetHoldingsUseCase:
    """Returns just the holdings of the caller's portfolio."""

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._portfolio = GetPortfolioUseCase(uow_factory)

    def execute(self, query: OwnerQuery) -> list[HoldingResult]:
        return self._portfolio.execute(query).holdings
