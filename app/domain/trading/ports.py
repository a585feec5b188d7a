"""
Port interfaces (ABCs) for the trading bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from app.domain.trading.entities import (
    AssetType,
    Order,
    OrderSide,
    OrderStatus,
    Portfolio,
    Stock,
)


class StockCatalog(ABC):
    """Port for read-only lookups in the instrument catalog."""

    @abstractmethod
    def get_by_ticker(self, ticker: str) -> Optional[Stock]:
        """Return the stock for a ticker (case-insensitive), or None."""
        raise NotImplementedError

    @abstractmethod
    def search(
        self,
        query: str,
        asset_type: Optional[AssetType] = None,
        limit: int = 10,
    ) -> list[Stock]:
        """Return stocks whose ticker or name contains ``query``.

        Args:
            query: Case-insensitive substring.
            asset_type: Optional filter on the instrument kind.
            limit: Maximum number of results.
        """
        raise NotImplementedError


class PortfolioRepository(ABC):
    """Port for persisting and retrieving portfolios."""

    @abstractmethod
    def get_by_owner(
        self, owner_id: UUID, for_update: bool = False
    ) -> Optional[Portfolio]:
        """Return the owner's portfolio with its holdings, or None.

        Args:
            owner_id: Portfolio owner.
            for_update: Lock the portfolio row until the unit of work ends.
        """
        raise NotImplementedError

    @abstractmethod
    def add(self, portfolio: Portfolio) -> None:
        """Persist a new portfolio.

        Raises:
            DuplicatePortfolioError: If the owner already has one.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, portfolio: Portfolio) -> None:
        """Persist changes to an existing portfolio and bump its version.

        Raises:
            ConcurrentModificationError: If the stored version no longer
                matches ``portfolio.version``.
        """
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for the order ledger."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, order_id: UUID) -> Optional[Order]:
        """Return an order by ID, or None."""
        raise NotImplementedError

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a status change on an existing order."""
        raise NotImplementedError

    @abstractmethod
    def list_by_owner(
        self,
        owner_id: UUID,
        status: Optional[OrderStatus] = None,
        side: Optional[OrderSide] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Order]:
        """Return the owner's orders, newest first."""
        raise NotImplementedError

    @abstractmethod
    def count_by_owner(
        self,
        owner_id: UUID,
        status: Optional[OrderStatus] = None,
        side: Optional[OrderSide] = None,
    ) -> int:
        """Count the owner's orders matching the same filters as list_by_owner."""
        raise NotImplementedError


class TradingUnitOfWork(ABC):
    """Port grouping the trading repositories under one transaction.

    Used as a context manager. Anything not committed when the block
    exits is rolled back.
    """

    stocks: StockCatalog
    portfolios: PortfolioRepository
    orders: OrderRepository

    def __enter__(self) -> "TradingUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every write in this unit durable at once.

        Raises:
            CommitOutcomeUnknownError: If the store failed during commit.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted writes. Safe to call after commit."""
        raise NotImplementedError


class CallerIdentityPort(ABC):
    """Port resolving an API bearer token to the calling user's ID."""

    @abstractmethod
    def resolve(self, token: str) -> Optional[UUID]:
        """Return the owner ID for a token, or None if it is unknown."""
        raise NotImplementedError
