"""
FastAPI router for the trading bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
Every route requires a bearer token.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from app.application.trading.cancel_order import CancelOrderUseCase
from app.application.trading.dtos import (
    CancelOrderCommand,
    HoldingResult,
    ListOrdersQuery,
    OrderPage,
    OrderResult,
    OwnerQuery,
    PlaceOrderCommand,
    PortfolioResult,
    SearchStocksQuery,
    StockResult,
)
from app.application.trading.get_portfolio import (
    GetHoldingsUseCase,
    GetPortfolioUseCase,
)
from app.application.trading.get_portfolio_metrics import GetPortfolioMetricsUseCase
from app.application.trading.list_orders import ListOrdersUseCase
from app.application.trading.place_order import PlaceOrderUseCase
from app.application.trading.revalue_portfolio import RevaluePortfolioUseCase
from app.application.trading.stock_catalog import GetStockUseCase, SearchStocksUseCase
from app.core.config import settings
from app.interfaces.trading.dependencies import (
    get_cancel_order_use_case,
    get_current_owner_id,
    get_holdings_use_case,
    get_list_orders_use_case,
    get_place_order_use_case,
    get_portfolio_metrics_use_case,
    get_portfolio_use_case,
    get_revalue_portfolio_use_case,
    get_search_stocks_use_case,
    get_stock_use_case,
)
from app.interfaces.trading.schemas import (
    ErrorResponse,
    HoldingSchema,
    HoldingsResponse,
    MetricsResponse,
    MetricsSchema,
    OrderListResponse,
    OrderResponse,
    OrderSchema,
    PaginationSchema,
    PlaceOrderRequest,
    PortfolioResponse,
    PortfolioSchema,
    StockResponse,
    StockSchema,
    StockSearchResponse,
    TransactionListResponse,
)
from app.shared.security.rate_limiting import limiter

router = APIRouter(tags=["trading"])

AUTH_ERRORS = {401: {"model": ErrorResponse}}


def _order_schema(r: OrderResult) -> OrderSchema:
    return OrderSchema(
        id=r.id,
        ticker=r.ticker,
        type=r.side,
        quantity=r.quantity,
        price=r.price,
        total=r.total,
        order_type=r.order_type,
        status=r.status,
        filled_quantity=r.filled_quantity,
        average_fill_price=r.average_fill_price,
        fee=r.fee,
        commission=r.commission,
        executed_at=r.executed_at,
        created_at=r.created_at,
    )


def _pagination(page: OrderPage) -> PaginationSchema:
    return PaginationSchema(total=page.total, limit=page.limit, offset=page.offset)


def _holding_schema(h: HoldingResult) -> HoldingSchema:
    return HoldingSchema(
        ticker=h.ticker,
        quantity=h.quantity,
        average_cost=h.average_cost,
        current_price=h.current_price,
        total_value=h.total_value,
        gain_loss=h.gain_loss,
        gain_loss_percent=h.gain_loss_percent,
        last_updated=h.last_updated,
    )


def _portfolio_schema(p: PortfolioResult) -> PortfolioSchema:
    return PortfolioSchema(
        id=p.id,
        cash=p.cash,
        total_value=p.total_value,
        invested_value=p.invested_value,
        total_gain_loss=p.total_gain_loss,
        total_gain_loss_percent=p.total_gain_loss_percent,
        holdings_count=p.holdings_count,
        holdings=[_holding_schema(h) for h in p.holdings],
    )


def _stock_schema(s: StockResult) -> StockSchema:
    return StockSchema(
        ticker=s.ticker,
        name=s.name,
        type=s.asset_type,
        current_price=s.current_price,
        previous_close=s.previous_close,
        day_high=s.day_high,
        day_low=s.day_low,
        volume=s.volume,
        currency=s.currency,
        change=s.change,
        change_percent=s.change_percent,
        exchange=s.exchange,
        market_cap=s.market_cap,
        last_updated=s.last_updated,
    )


# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------


@router.post(
    "/orders",
    status_code=status.HTTP_201_CREATED,
    response_model=OrderResponse,
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Place an order",
    description="Execute a buy or sell order against the caller's portfolio.",
)
@limiter.limit(settings.rate_limit_orders)
def place_order(
    request: Request,
    payload: PlaceOrderRequest,
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: PlaceOrderUseCase = Depends(get_place_order_use_case),
) -> OrderResponse:
    """Place and immediately fill an order."""
    command = PlaceOrderCommand(
        owner_id=owner_id,
        ticker=payload.ticker,
        side=payload.side,
        quantity=payload.quantity,
        price=payload.price,
        order_type=payload.order_type,
    )
    result = use_case.execute(command)
    return OrderResponse(order=_order_schema(result))


@router.get(
    "/orders",
    response_model=OrderListResponse,
    responses={**AUTH_ERRORS, 422: {"model": ErrorResponse}},
    dependencies=[Depends(get_current_owner_id)],
    summary="Order history",
    description="Page through the caller's orders, newest first.",
)
def get_order_history(
    order_status: Optional[str] = Query(default=None, alias="status"),
    limit: int = 20,
    offset: int = 0,
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case),
) -> OrderListResponse:
    """List the caller's orders with an optional status filter."""
    page = use_case.execute(
        ListOrdersQuery(
            owner_id=owner_id, status=order_status, limit=limit, offset=offset
        )
    )
    return OrderListResponse(
        orders=[_order_schema(o) for o in page.orders],
        pagination=_pagination(page),
    )


@router.put(
    "/orders/{order_id}/cancel",
    response_model=OrderResponse,
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Cancel an order",
    description="Cancel a PENDING or PARTIAL order owned by the caller.",
)
def cancel_order(
    order_id: UUID,
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: CancelOrderUseCase = Depends(get_cancel_order_use_case),
) -> OrderResponse:
    """Cancel one of the caller's open orders."""
    result = use_case.execute(CancelOrderCommand(owner_id=owner_id, order_id=order_id))
    return OrderResponse(order=_order_schema(result))


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


@router.get(
    "/portfolio",
    response_model=PortfolioResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}},
    summary="Portfolio overview",
)
def get_portfolio(
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: GetPortfolioUseCase = Depends(get_portfolio_use_case),
) -> PortfolioResponse:
    """Return cash, totals and holdings of the caller's portfolio."""
    result = use_case.execute(OwnerQuery(owner_id=owner_id))
    return PortfolioResponse(portfolio=_portfolio_schema(result))


@router.get(
    "/portfolio/holdings",
    response_model=HoldingsResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}},
    summary="Portfolio holdings",
)
def get_holdings(
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: GetHoldingsUseCase = Depends(get_holdings_use_case),
) -> HoldingsResponse:
    holdings = use_case.execute(OwnerQuery(owner_id=owner_id))
    return HoldingsResponse(
        holdings=[_holding_schema(h) for h in holdings],
        count=len(holdings),
    )


@router.get(
    "/portfolio/transactions",
    response_model=TransactionListResponse,
    responses={**AUTH_ERRORS, 422: {"model": ErrorResponse}},
    summary="Portfolio transactions",
    description="The caller's order ledger, optionally filtered by BUY/SELL.",
)
def get_transactions(
    side: Optional[str] = Query(default=None, alias="type"),
    limit: int = 50,
    offset: int = 0,
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case),
) -> TransactionListResponse:
    """List the caller's transactions, newest first."""
    page = use_case.execute(
        ListOrdersQuery(owner_id=owner_id, side=side, limit=limit, offset=offset)
    )
    return TransactionListResponse(
        transactions=[_order_schema(o) for o in page.orders],
        pagination=_pagination(page),
    )


@router.get(
    "/portfolio/metrics",
    response_model=MetricsResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}},
    summary="Portfolio metrics",
    description="Allocation, top gainers/losers and total gain/loss.",
)
def get_metrics(
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: GetPortfolioMetricsUseCase = Depends(get_portfolio_metrics_use_case),
) -> MetricsResponse:
    """Compute metrics over the caller's current portfolio state."""
    result = use_case.execute(OwnerQuery(owner_id=owner_id))
    return MetricsResponse(
        metrics=MetricsSchema(
            total_value=result.total_value,
            cash=result.cash,
            invested_value=result.invested_value,
            total_gain_loss=result.total_gain_loss,
            total_gain_loss_percent=result.total_gain_loss_percent,
            allocation=result.allocation,
            top_gainers=[_holding_schema(h) for h in result.top_gainers],
            top_losers=[_holding_schema(h) for h in result.top_losers],
        )
    )


@router.post(
    "/portfolio/revalue",
    response_model=PortfolioResponse,
    responses={
        **AUTH_ERRORS,
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Re-price holdings",
    description="Refresh every holding's current price from the stock catalog.",
)
def revalue_portfolio(
    owner_id: UUID = Depends(get_current_owner_id),
    use_case: RevaluePortfolioUseCase = Depends(get_revalue_portfolio_use_case),
) -> PortfolioResponse:
    result = use_case.execute(OwnerQuery(owner_id=owner_id))
    return PortfolioResponse(portfolio=_portfolio_schema(result))


# ------------------------------------------------------------------
# Stock catalog
# ------------------------------------------------------------------


@router.get(
    "/stocks/search",
    response_model=StockSearchResponse,
    responses={**AUTH_ERRORS, 422: {"model": ErrorResponse}},
    dependencies=[Depends(get_current_owner_id)],
    summary="Search instruments",
    description="Case-insensitive substring search over ticker and name.",
)
def search_stocks(
    query: str = Query(..., min_length=1, max_length=50),
    asset_type: Optional[str] = Query(default=None, alias="type"),
    limit: int = Query(default=10, ge=1, le=50),
    use_case: SearchStocksUseCase = Depends(get_search_stocks_use_case),
) -> StockSearchResponse:
    results = use_case.execute(
        SearchStocksQuery(query=query, asset_type=asset_type, limit=limit)
    )
    return StockSearchResponse(
        results=[_stock_schema(s) for s in results],
        count=len(results),
    )


@router.get(
    "/stocks/{ticker}",
    response_model=StockResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}},
    dependencies=[Depends(get_current_owner_id)],
    summary="Instrument details",
)
def get_stock(
    ticker: str,
    use_case: GetStockUseCase = Depends(get_stock_use_case),
) -> StockResponse:
    """Look up one instrument by ticker (case-insensitive)."""
    return StockResponse(stock=_stock_schema(use_case.execute(ticker)))
