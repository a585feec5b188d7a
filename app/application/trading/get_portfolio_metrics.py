"""
Use case: Compute allocation, top movers and gain/loss for a portfolio.

Input: OwnerQuery (owner_id)
Output: MetricsResult
Side effects: None. Pure read; repeated calls on unchanged state agree.
Failure cases: PortfolioNotFoundError.
"""

import logging
from typing import Callable

from app.application.trading.dtos import MetricsResult, OwnerQuery
from app.application.trading.mappers import to_holding_result
from app.domain.trading.errors import PortfolioNotFoundError
from app.domain.trading.metrics import TOP_MOVERS_LIMIT, compute_metrics
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)


class GetPortfolioMetricsUseCase:
    """Loads the caller's portfolio and delegates to the metrics service."""

    def __init__(
        self,
        uow_factory: Callable[[], TradingUnitOfWork],
        top_n: int = TOP_MOVERS_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self._top_n = top_n

    def execute(self, query: OwnerQuery) -> MetricsResult:
        """Run the metrics use case.

        Raises:
            PortfolioNotFoundError: If the caller has no portfolio.
        """
        logger.info("Computing metrics for owner=%s", query.owner_id)

        with self._uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(query.owner_id)
        if portfolio is None:
            raise PortfolioNotFoundError(str(query.owner_id))

        metrics = compute_metrics(portfolio, top_n=self._top_n)
        return MetricsResult(
            total_value=metrics.total_value,
            cash=metrics.cash,
            invested_value=metrics.invested_value,
            total_gain_loss=metrics.total_gain_loss,
            total_gain_loss_percent=metrics.total_gain_loss_percent,
            allocation=metrics.allocation,
            top_gainers=[to_holding_result(h) for h in metrics.top_gainers],
            top_losers=[to_holding_result(h) for h in metrics.top_losers],
        )
