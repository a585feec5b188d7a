"""
Use cases: Look up and search the stock catalog.

Input: ticker / SearchStocksQuery
Output: StockResult / list[StockResult]
Side effects: None.
Failure cases: StockNotFoundError, ValidationError.
"""

import logging
from typing import Callable

from app.application.trading.dtos import SearchStocksQuery, StockResult
from app.application.trading.mappers import to_stock_result
from app.domain.trading.entities import AssetType
from app.domain.trading.errors import StockNotFoundError, ValidationError
from app.domain.trading.ports import TradingUnitOfWork

logger = logging.getLogger(__name__)


class GetStockUseCase:
    """Returns one catalog entry by ticker."""

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, ticker: str) -> StockResult:
        normalized = ticker.strip().upper()
        with self._uow_factory() as uow:
            stock = uow.stocks.get_by_ticker(normalized)
        if stock is None:
            raise StockNotFoundError(normalized)
        return to_stock_result(stock)


class SearchStocksUseCase:
    """Finds catalog entries by ticker or name substring."""

    def __init__(self, uow_factory: Callable[[], TradingUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, query: SearchStocksQuery) -> list[StockResult]:
        """Run the search.

        Raises:
            ValidationError: If the query is blank or the type is unknown.
        """
        text = query.query.strip()
        if not text:
            raise ValidationError("query", "search query is required")

        asset_type = None
        if query.asset_type:
            try:
                asset_type = AssetType(query.asset_type.upper())
            except ValueError:
                raise ValidationError(
                    "type", "must be CRYPTO, STOCK, or COMMODITY"
                ) from None

        logger.info("Searching catalog query=%r type=%s", text, query.asset_type)
        with self._uow_factory() as uow:
            stocks = uow.stocks.search(text, asset_type=asset_type, limit=query.limit)
        return [to_stock_result(s) for s in stocks]
