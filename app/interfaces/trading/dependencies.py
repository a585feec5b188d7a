"""
Dependency injection for the trading bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the trading context.
"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine

from app.application.trading.cancel_order import CancelOrderUseCase
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
from app.domain.trading.ports import CallerIdentityPort
from app.infrastructure.trading.database import build_engine
from app.infrastructure.trading.identity_repository import ApiTokenIdentityAdapter
from app.infrastructure.trading.unit_of_work import SqlTradingUnitOfWork

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_db_engine() -> Engine:
    """Build the process-wide SQLAlchemy engine from application settings."""
    return build_engine(settings.get_database_url())


def _uow_factory(engine: Engine):
    return lambda: SqlTradingUnitOfWork(engine)


def get_identity_port(engine: Engine = Depends(get_db_engine)) -> CallerIdentityPort:
    """Build the bearer-token identity adapter."""
    return ApiTokenIdentityAdapter(engine)


def get_current_owner_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    identity: CallerIdentityPort = Depends(get_identity_port),
) -> UUID:
    """Resolve the caller from ``Authorization: Bearer <token>``.

    Raises:
        HTTPException: 401 if the header is missing or the token is unknown.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    owner_id = identity.resolve(credentials.credentials)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id


def get_place_order_use_case(
    engine: Engine = Depends(get_db_engine),
) -> PlaceOrderUseCase:
    """Build PlaceOrderUseCase with its infrastructure dependencies."""
    return PlaceOrderUseCase(
        uow_factory=_uow_factory(engine),
        fee_rate=settings.fee_rate,
        max_attempts=settings.order_max_attempts,
    )


def get_cancel_order_use_case(
    engine: Engine = Depends(get_db_engine),
) -> CancelOrderUseCase:
    """Build CancelOrderUseCase with its infrastructure dependencies."""
    return CancelOrderUseCase(uow_factory=_uow_factory(engine))


def get_list_orders_use_case(
    engine: Engine = Depends(get_db_engine),
) -> ListOrdersUseCase:
    """Build ListOrdersUseCase with its infrastructure dependencies."""
    return ListOrdersUseCase(uow_factory=_uow_factory(engine))


def get_portfolio_use_case(
    engine: Engine = Depends(get_db_engine),
) -> GetPortfolioUseCase:
    """Build GetPortfolioUseCase with its infrastructure dependencies."""
    return GetPortfolioUseCase(uow_factory=_uow_factory(engine))


def get_holdings_use_case(
    engine: Engine = Depends(get_db_engine),
) -> GetHoldingsUseCase:
    """Build GetHoldingsUseCase with its infrastructure dependencies."""
    return GetHoldingsUseCase(uow_factory=_uow_factory(engine))


def get_portfolio_metrics_use_case(
    engine: Engine = Depends(get_db_engine),
) -> GetPortfolioMetricsUseCase:
    """Build GetPortfolioMetricsUseCase with its infrastructure dependencies."""
    return GetPortfolioMetricsUseCase(
        uow_factory=_uow_factory(engine),
        top_n=settings.top_movers_limit,
    )


def get_revalue_portfolio_use_case(
    engine: Engine = Depends(get_db_engine),
) -> RevaluePortfolioUseCase:
    """Build RevaluePortfolioUseCase with its infrastructure dependencies."""
    return RevaluePortfolioUseCase(
        uow_factory=_uow_factory(engine),
        max_attempts=settings.order_max_attempts,
    )


def get_stock_use_case(engine: Engine = Depends(get_db_engine)) -> GetStockUseCase:
    """Build GetStockUseCase with its infrastructure dependencies."""
    return GetStockUseCase(uow_factory=_uow_factory(engine))


def get_search_stocks_use_case(
    engine: Engine = Depends(get_db_engine),
) -> SearchStocksUseCase:
    """Build SearchStocksUseCase with its infrastructure dependencies."""
    return SearchStocksUseCase(uow_factory=_uow_factory(engine))
