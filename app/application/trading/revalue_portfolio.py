"""
Use case: Re-price every holding from the stock catalog.

Order placement keeps each holding's last-known price. This is the one
operation that refreshes prices, recomputing holding values and the
portfolio total from current catalog quotes.

Input: OwnerQuery (owner_id)
Output: PortfolioResult
Side effects: Updates holding prices on one Portfolio.
Failure cases: PortfolioNotFoundError, ConcurrentModificationError
    (after retries), CommitOutcomeUnknownError.
"""

import logging
from typing import Callable

from app.application.trading.dtos import OwnerQuery, PortfolioResult
from app.application.trading.mappers import to_portfolio_result
from app.domain.trading.entities import utcnow
from app.domain.trading.errors import (
    ConcurrentModificationError,
    PortfolioNotFoundError,
)
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)


class RevaluePortfolioUseCase:
    """Marks the caller's holdings to the catalog's current prices.

    Holdings whose ticker is no longer in the catalog keep their
    last-known price.
    """

    def __init__(
        self,
        uow_factory: Callable[[], TradingUnitOfWork],
        max_attempts: int = 3,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max(1, max_attempts)

    def execute(self, query: OwnerQuery) -> PortfolioResult:
        logger.info("Revaluing portfolio for owner=%s", query.owner_id)
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._attempt(query)
            except ConcurrentModificationError:
                if attempt == self._max_attempts:
                    raise
                logger.warning(
                    "Retrying revaluation for owner=%s (attempt %d/%d)",
                    query.owner_id,
                    attempt,
                    self._max_attempts,
                )
        raise AssertionError("unreachable")

    def _attempt(self, query: OwnerQuery) -> PortfolioResult:
        with self._uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(query.owner_id, for_update=True)
            if portfolio is None:
                raise PortfolioNotFoundError(str(query.owner_id))

            now = utcnow()
            for ticker, holding in portfolio.holdings.items():
                stock = uow.stocks.get_by_ticker(ticker)
                if stock is None:
                    logger.warning("No catalog price for %s; keeping last price", ticker)
                    continue
                holding.current_price = stock.current_price
                holding.last_updated = now
            portfolio.updated_at = now

            uow.portfolios.save(portfolio)
            uow.commit()

        return to_portfolio_result(portfolio)
