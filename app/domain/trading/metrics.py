"""
Portfolio metrics: allocation, top movers and aggregate gain/loss.

Read-only views derived from a Portfolio's current state. Calling
``compute_metrics`` twice on an unchanged portfolio gives equal results.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from app.domain.trading.entities import HUNDRED, ZERO, Holding, Portfolio

TOP_MOVERS_LIMIT = 5


@dataclass(frozen=True)
class PortfolioMetrics:
    """Snapshot of derived portfolio analytics."""

    total_value: Decimal
    cash: Decimal
    invested_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    allocation: dict[str, Decimal] = field(default_factory=dict)
    top_gainers: list[Holding] = field(default_factory=list)
    top_losers: list[Holding] = field(default_factory=list)


def _ordered_holdings(portfolio: Portfolio) -> list[Holding]:
    # Ticker order first so equal percentages tie-break deterministically.
    return [portfolio.holdings[t] for t in sorted(portfolio.holdings)]


def compute_allocation(portfolio: Portfolio) -> dict[str, Decimal]:
    """Share of total portfolio value held in each ticker, in percent."""
    total_value = portfolio.total_value
    allocation: dict[str, Decimal] = {}
    for holding in _ordered_holdings(portfolio):
        if total_value == 0:
            allocation[holding.ticker] = ZERO
        else:
            allocation[holding.ticker] = holding.total_value / total_value * HUNDRED
    return allocation


def compute_metrics(
    portfolio: Portfolio, top_n: int = TOP_MOVERS_LIMIT
) -> PortfolioMetrics:
    """Build the metrics view for a portfolio.

    Args:
        portfolio: Portfolio to analyse. Not modified.
        top_n: How many holdings to keep in each of the gainers/losers lists.

    Returns:
        A PortfolioMetrics snapshot.
    """
    holdings = _ordered_holdings(portfolio)
    gainers = sorted(holdings, key=lambda h: h.gain_loss_percent, reverse=True)
    losers = sorted(holdings, key=lambda h: h.gain_loss_percent)

    return PortfolioMetrics(
        total_value=portfolio.total_value,
        cash=portfolio.cash,
        invested_value=portfolio.invested_value,
        total_gain_loss=portfolio.total_gain_loss,
        total_gain_loss_percent=portfolio.total_gain_loss_percent,
        allocation=compute_allocation(portfolio),
        top_gainers=gainers[:top_n],
        top_losers=losers[:top_n],
    )
