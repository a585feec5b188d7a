"""
Entity-to-DTO mapping shared by the trading use cases.
"""

from app.application.trading.dtos import (
    HoldingResult,
    OrderResult,
    PortfolioResult,
    StockResult,
)
from app.domain.trading.entities import Holding, Order, Portfolio, Stock


def to_order_result(order: Order) -> OrderResult:
    return OrderResult(
        id=order.id,
        owner_id=order.owner_id,
        ticker=order.ticker,
        side=order.side.value,
        quantity=order.quantity,
        price=order.price,
        total=order.total,
        order_type=order.order_type.value,
        status=order.status.value,
        filled_quantity=order.filled_quantity,
        average_fill_price=order.average_fill_price,
        fee=order.fee,
        commission=order.commission,
        executed_at=order.executed_at,
        created_at=order.created_at,
    )


def to_holding_result(holding: Holding) -> HoldingResult:
    return HoldingResult(
        ticker=holding.ticker,
        quantity=holding.quantity,
        average_cost=holding.average_cost,
        current_price=holding.current_price,
        total_value=holding.total_value,
        gain_loss=holding.gain_loss,
        gain_loss_percent=holding.gain_loss_percent,
        last_updated=holding.last_updated,
    )


def to_portfolio_result(portfolio: Portfolio) -> PortfolioResult:
    return PortfolioResult(
        id=portfolio.id,
        owner_id=portfolio.owner_id,
        cash=portfolio.cash,
        total_value=portfolio.total_value,
        invested_value=portfolio.invested_value,
        total_gain_loss=portfolio.total_gain_loss,
        total_gain_loss_percent=portfolio.total_gain_loss_percent,
        holdings=[
            to_holding_result(portfolio.holdings[t]) for t in sorted(portfolio.holdings)
        ],
    )


def to_stock_result(stock: Stock) -> StockResult:
    return StockResult(
        ticker=stock.ticker,
        name=stock.name,
        asset_type=stock.asset_type.value,
        current_price=stock.current_price,
        previous_close=stock.previous_close,
        day_high=stock.day_high,
        day_low=stock.day_low,
        volume=stock.volume,
        currency=stock.currency,
        change=stock.change,
        change_percent=stock.change_percent,
        exchange=stock.exchange,
        market_cap=stock.market_cap,
        last_updated=stock.last_updated,
    )
