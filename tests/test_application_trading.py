"""
Tests for the trading application layer (use cases).

Tests use cases against in-memory fake ports. No real infrastructure needed.
Each test verifies orchestration logic: lookups, commits, retries.
"""

import copy
import uuid
from decimal import Decimal

import pytest

from app.application.trading.cancel_order import CancelOrderUseCase
from app.application.trading.dtos import (
    CancelOrderCommand,
    ListOrdersQuery,
    OpenPortfolioCommand,
    OwnerQuery,
    PlaceOrderCommand,
    SearchStocksQuery,
)
from app.application.trading.get_portfolio import GetHoldingsUseCase, GetPortfolioUseCase
from app.application.trading.get_portfolio_metrics import GetPortfolioMetricsUseCase
from app.application.trading.list_orders import ListOrdersUseCase
from app.application.trading.open_portfolio import OpenPortfolioUseCase
from app.application.trading.place_order import PlaceOrderUseCase
from app.application.trading.revalue_portfolio import RevaluePortfolioUseCase
from app.application.trading.stock_catalog import GetStockUseCase, SearchStocksUseCase
from app.domain.trading.entities import (
    AssetType,
    Order,
    OrderSide,
    OrderStatus,
    Portfolio,
    Stock,
)
from app.domain.trading.errors import (
    CommitOutcomeUnknownError,
    ConcurrentModificationError,
    DuplicatePortfolioError,
    InsufficientFundsError,
    InvalidStateError,
    OrderNotFoundError,
    PortfolioNotFoundError,
    StockNotFoundError,
    ValidationError,
)
from app.domain.trading.ports import (
    OrderRepository,
    PortfolioRepository,
    StockCatalog,
    TradingUnitOfWork,
)


# ------------------------------------------------------------------
# In-memory fakes
# ------------------------------------------------------------------


class FakeStore:
    """Committed state shared by every fake unit of work."""

    def __init__(self) -> None:
        self.stocks: dict[str, Stock] = {}
        self.portfolios: dict[uuid.UUID, Portfolio] = {}
        self.orders: dict[uuid.UUID, Order] = {}
        self.conflicts_to_raise = 0
        self.fail_commit = False
        self.commits = 0
        self.attempts = 0


class FakeStockCatalog(StockCatalog):
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def get_by_ticker(self, ticker):
        return self._store.stocks.get(ticker.upper())

    def search(self, query, asset_type=None, limit=10):
        needle = query.lower()
        found = [
            s
            for t, s in sorted(self._store.stocks.items())
            if needle in t.lower() or needle in s.name.lower()
        ]
        if asset_type is not None:
            found = [s for s in found if s.asset_type is asset_type]
        return found[:limit]


class FakePortfolioRepository(PortfolioRepository):
    def __init__(self, store: FakeStore, staged: dict) -> None:
        self._store = store
        self._staged = staged

    def get_by_owner(self, owner_id, for_update=False):
        if for_update:
            self._store.attempts += 1
        return copy.deepcopy(self._store.portfolios.get(owner_id))

    def add(self, portfolio):
        if portfolio.owner_id in self._store.portfolios:
            raise DuplicatePortfolioError(str(portfolio.owner_id))
        self._staged[portfolio.owner_id] = copy.deepcopy(portfolio)

    def save(self, portfolio):
        stored = self._store.portfolios[portfolio.owner_id]
        if self._store.conflicts_to_raise > 0:
            self._store.conflicts_to_raise -= 1
            raise ConcurrentModificationError(str(portfolio.id))
        if stored.version != portfolio.version:
            raise ConcurrentModificationError(str(portfolio.id))
        portfolio.version += 1
        self._staged[portfolio.owner_id] = copy.deepcopy(portfolio)


class FakeOrderRepository(OrderRepository):
    def __init__(self, store: FakeStore, staged: dict) -> None:
        self._store = store
        self._staged = staged

    def add(self, order):
        self._staged[order.id] = copy.deepcopy(order)

    def get_by_id(self, order_id):
        return copy.deepcopy(self._store.orders.get(order_id))

    def save(self, order):
        self._staged[order.id] = copy.deepcopy(order)

    def _matching(self, owner_id, status, side):
        return [
            o
            for o in sorted(
                self._store.orders.values(), key=lambda o: o.created_at, reverse=True
            )
            if o.owner_id == owner_id
            and (status is None or o.status is status)
            and (side is None or o.side is side)
        ]

    def list_by_owner(self, owner_id, status=None, side=None, limit=20, offset=0):
        return self._matching(owner_id, status, side)[offset : offset + limit]

    def count_by_owner(self, owner_id, status=None, side=None):
        return len(self._matching(owner_id, status, side))


class FakeUnitOfWork(TradingUnitOfWork):
    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self._staged_portfolios: dict = {}
        self._staged_orders: dict = {}
        self.stocks = FakeStockCatalog(store)
        self.portfolios = FakePortfolioRepository(store, self._staged_portfolios)
        self.orders = FakeOrderRepository(store, self._staged_orders)

    def commit(self):
        if self._store.fail_commit:
            raise CommitOutcomeUnknownError("connection reset")
        self._store.portfolios.update(self._staged_portfolios)
        self._store.orders.update(self._staged_orders)
        self._store.commits += 1
        self.rollback()

    def rollback(self):
        self._staged_portfolios.clear()
        self._staged_orders.clear()


def _stock(ticker: str, price: str, asset_type=AssetType.CRYPTO) -> Stock:
    value = Decimal(price)
    return Stock(
        ticker=ticker,
        name=f"{ticker} coin",
        asset_type=asset_type,
        current_price=value,
        previous_close=value,
        day_high=value,
        day_low=value,
    )


@pytest.fixture
def store() -> FakeStore:
    s = FakeStore()
    s.stocks["BTC"] = _stock("BTC", "100")
    s.stocks["AAPL"] = _stock("AAPL", "150", AssetType.STOCK)
    return s


@pytest.fixture
def owner_id(store) -> uuid.UUID:
    owner = uuid.uuid4()
    store.portfolios[owner] = Portfolio(owner_id=owner, cash=Decimal("10000"))
    return owner


def _factory(store):
    return lambda: FakeUnitOfWork(store)


def _buy_command(owner_id, ticker="BTC", quantity="10", price="100") -> PlaceOrderCommand:
    return PlaceOrderCommand(
        owner_id=owner_id,
        ticker=ticker,
        side="BUY",
        quantity=Decimal(quantity),
        price=Decimal(price),
    )


# ------------------------------------------------------------------
# Tests
# ------------------------------------------------------------------


class TestPlaceOrderUseCase:
    """Tests for the PlaceOrderUseCase."""

    def test_buy_commits_portfolio_and_order_together(self, store, owner_id) -> None:
        result = PlaceOrderUseCase(_factory(store)).execute(_buy_command(owner_id))

        assert result.status == "FILLED"
        assert result.side == "BUY"
        assert store.commits == 1
        assert store.portfolios[owner_id].cash == Decimal("8999")
        assert store.portfolios[owner_id].version == 1
        assert result.id in store.orders

    def test_lowercase_ticker_is_normalized(self, store, owner_id) -> None:
        result = PlaceOrderUseCase(_factory(store)).execute(
            _buy_command(owner_id, ticker="btc")
        )
        assert result.ticker == "BTC"

    def test_unknown_ticker_raises(self, store, owner_id) -> None:
        with pytest.raises(StockNotFoundError):
            PlaceOrderUseCase(_factory(store)).execute(
                _buy_command(owner_id, ticker="DOGE")
            )
        assert store.commits == 0

    def test_missing_portfolio_raises(self, store) -> None:
        with pytest.raises(PortfolioNotFoundError):
            PlaceOrderUseCase(_factory(store)).execute(_buy_command(uuid.uuid4()))

    def test_invalid_side_raises(self, store, owner_id) -> None:
        command = PlaceOrderCommand(
            owner_id=owner_id,
            ticker="BTC",
            side="HOLD",
            quantity=Decimal("1"),
            price=Decimal("1"),
        )
        with pytest.raises(ValidationError):
            PlaceOrderUseCase(_factory(store)).execute(command)

    def test_failed_fill_writes_nothing(self, store, owner_id) -> None:
        with pytest.raises(InsufficientFundsError):
            PlaceOrderUseCase(_factory(store)).execute(
                _buy_command(owner_id, quantity="1000", price="100")
            )
        assert store.commits == 0
        assert store.orders == {}
        assert store.portfolios[owner_id].cash == Decimal("10000")

    def test_conflict_is_retried_on_fresh_state(self, store, owner_id) -> None:
        store.conflicts_to_raise = 2
        result = PlaceOrderUseCase(_factory(store), max_attempts=3).execute(
            _buy_command(owner_id)
        )

        assert result.status == "FILLED"
        assert store.attempts == 3
        assert store.commits == 1
        assert store.portfolios[owner_id].cash == Decimal("8999")
        assert len(store.orders) == 1

    def test_conflict_gives_up_after_max_attempts(self, store, owner_id) -> None:
        store.conflicts_to_raise = 5
        with pytest.raises(ConcurrentModificationError):
            PlaceOrderUseCase(_factory(store), max_attempts=3).execute(
                _buy_command(owner_id)
            )
        assert store.attempts == 3
        assert store.commits == 0
        assert store.orders == {}

    def test_unknown_commit_outcome_is_not_retried(self, store, owner_id) -> None:
        store.fail_commit = True
        with pytest.raises(CommitOutcomeUnknownError):
            PlaceOrderUseCase(_factory(store), max_attempts=3).execute(
                _buy_command(owner_id)
            )
        assert store.attempts == 1

    def test_custom_fee_rate(self, store, owner_id) -> None:
        result = PlaceOrderUseCase(_factory(store), fee_rate=Decimal("0.01")).execute(
            _buy_command(owner_id)
        )
        assert result.fee == Decimal("10")
        assert store.portfolios[owner_id].cash == Decimal("8990")

    def test_order_path_does_not_reprice_holdings(self, store, owner_id) -> None:
        """Later orders keep a holding's last-known price even if the catalog moved."""
        use_case = PlaceOrderUseCase(_factory(store))
        use_case.execute(_buy_command(owner_id, quantity="10", price="100"))

        store.stocks["BTC"] = _stock("BTC", "300")
        use_case.execute(_buy_command(owner_id, quantity="1", price="300"))

        portfolio = store.portfolios[owner_id]
        assert portfolio.holding("BTC").current_price == Decimal("100")
        assert portfolio.total_value == portfolio.cash + Decimal("11") * Decimal("100")


class TestRevaluePortfolioUseCase:
    """Tests for the RevaluePortfolioUseCase."""

    def test_revalue_reprices_from_catalog(self, store, owner_id) -> None:
        PlaceOrderUseCase(_factory(store)).execute(_buy_command(owner_id))
        store.stocks["BTC"] = _stock("BTC", "250")

        result = RevaluePortfolioUseCase(_factory(store)).execute(OwnerQuery(owner_id))

        holding = result.holdings[0]
        assert holding.current_price == Decimal("250")
        assert holding.total_value == Decimal("2500")
        assert result.total_value == Decimal("8999") + Decimal("2500")
        assert store.portfolios[owner_id].holding("BTC").current_price == Decimal("250")

    def test_delisted_ticker_keeps_last_price(self, store, owner_id) -> None:
        PlaceOrderUseCase(_factory(store)).execute(_buy_command(owner_id))
        del store.stocks["BTC"]

        result = RevaluePortfolioUseCase(_factory(store)).execute(OwnerQuery(owner_id))
        assert result.holdings[0].current_price == Decimal("100")

    def test_revalue_retries_on_conflict(self, store, owner_id) -> None:
        store.conflicts_to_raise = 1
        RevaluePortfolioUseCase(_factory(store), max_attempts=2).execute(
            OwnerQuery(owner_id)
        )
        assert store.commits == 1

    def test_missing_portfolio_raises(self, store) -> None:
        with pytest.raises(PortfolioNotFoundError):
            RevaluePortfolioUseCase(_factory(store)).execute(OwnerQuery(uuid.uuid4()))


class TestCancelOrderUseCase:
    """Tests for the CancelOrderUseCase."""

    def _stored_order(self, store, owner_id, status) -> Order:
        order = Order(
            owner_id=owner_id,
            ticker="BTC",
            side=OrderSide.BUY,
            quantity=Decimal("1"),
            price=Decimal("100"),
            total=Decimal("100"),
            fee=Decimal("0.1"),
            status=status,
        )
        store.orders[order.id] = order
        return order

    def test_cancel_pending_order(self, store, owner_id) -> None:
        order = self._stored_order(store, owner_id, OrderStatus.PENDING)
        result = CancelOrderUseCase(_factory(store)).execute(
            CancelOrderCommand(owner_id=owner_id, order_id=order.id)
        )
        assert result.status == "CANCELLED"
        assert store.orders[order.id].status is OrderStatus.CANCELLED

    def test_cancel_filled_order_raises(self, store, owner_id) -> None:
        order = self._stored_order(store, owner_id, OrderStatus.FILLED)
        with pytest.raises(InvalidStateError):
            CancelOrderUseCase(_factory(store)).execute(
                CancelOrderCommand(owner_id=owner_id, order_id=order.id)
            )
        assert store.commits == 0

    def test_other_owners_order_is_not_found(self, store, owner_id) -> None:
        order = self._stored_order(store, owner_id, OrderStatus.PENDING)
        with pytest.raises(OrderNotFoundError):
            CancelOrderUseCase(_factory(store)).execute(
                CancelOrderCommand(owner_id=uuid.uuid4(), order_id=order.id)
            )

    def test_unknown_order_is_not_found(self, store, owner_id) -> None:
        with pytest.raises(OrderNotFoundError):
            CancelOrderUseCase(_factory(store)).execute(
                CancelOrderCommand(owner_id=owner_id, order_id=uuid.uuid4())
            )


class TestListOrdersUseCase:
    """Tests for the ListOrdersUseCase."""

    def test_pages_newest_first(self, store, owner_id) -> None:
        place = PlaceOrderUseCase(_factory(store))
        first = place.execute(_buy_command(owner_id, quantity="1"))
        second = place.execute(_buy_command(owner_id, quantity="2"))
        third = place.execute(_buy_command(owner_id, quantity="3"))

        page = ListOrdersUseCase(_factory(store)).execute(
            ListOrdersQuery(owner_id=owner_id, limit=2, offset=0)
        )
        assert [o.id for o in page.orders] == [third.id, second.id]
        assert page.total == 3

        rest = ListOrdersUseCase(_factory(store)).execute(
            ListOrdersQuery(owner_id=owner_id, limit=2, offset=2)
        )
        assert [o.id for o in rest.orders] == [first.id]

    def test_side_filter(self, store, owner_id) -> None:
        place = PlaceOrderUseCase(_factory(store))
        place.execute(_buy_command(owner_id, quantity="2"))
        place.execute(
            PlaceOrderCommand(
                owner_id=owner_id,
                ticker="BTC",
                side="SELL",
                quantity=Decimal("1"),
                price=Decimal("100"),
            )
        )
        page = ListOrdersUseCase(_factory(store)).execute(
            ListOrdersQuery(owner_id=owner_id, side="sell")
        )
        assert page.total == 1
        assert page.orders[0].side == "SELL"

    @pytest.mark.parametrize(
        "kwargs",
        [{"limit": 0}, {"limit": 101}, {"offset": -1}, {"status": "DONE"}, {"side": "X"}],
    )
    def test_bad_query_rejected(self, store, owner_id, kwargs) -> None:
        with pytest.raises(ValidationError):
            ListOrdersUseCase(_factory(store)).execute(
                ListOrdersQuery(owner_id=owner_id, **kwargs)
            )


class TestPortfolioReads:
    """Tests for portfolio overview, holdings and metrics."""

    def test_overview_and_holdings(self, store, owner_id) -> None:
        place = PlaceOrderUseCase(_factory(store))
        place.execute(_buy_command(owner_id, ticker="BTC"))
        place.execute(_buy_command(owner_id, ticker="AAPL", quantity="2", price="150"))

        overview = GetPortfolioUseCase(_factory(store)).execute(OwnerQuery(owner_id))
        assert overview.holdings_count == 2
        assert [h.ticker for h in overview.holdings] == ["AAPL", "BTC"]

        holdings = GetHoldingsUseCase(_factory(store)).execute(OwnerQuery(owner_id))
        assert [h.ticker for h in holdings] == ["AAPL", "BTC"]

    def test_metrics(self, store, owner_id) -> None:
        PlaceOrderUseCase(_factory(store)).execute(_buy_command(owner_id))
        metrics = GetPortfolioMetricsUseCase(_factory(store), top_n=1).execute(
            OwnerQuery(owner_id)
        )
        assert metrics.invested_value == Decimal("1000")
        assert list(metrics.allocation) == ["BTC"]
        assert len(metrics.top_gainers) == 1

    def test_missing_portfolio(self, store) -> None:
        with pytest.raises(PortfolioNotFoundError):
            GetPortfolioMetricsUseCase(_factory(store)).execute(OwnerQuery(uuid.uuid4()))


class TestOpenPortfolioUseCase:
    """Tests for the OpenPortfolioUseCase."""

    def test_opens_with_starting_cash(self, store) -> None:
        owner = uuid.uuid4()
        result = OpenPortfolioUseCase(
            _factory(store), starting_cash=Decimal("5000")
        ).execute(OpenPortfolioCommand(owner_id=owner))
        assert result.cash == Decimal("5000")
        assert store.portfolios[owner].cash == Decimal("5000")

    def test_duplicate_rejected(self, store, owner_id) -> None:
        with pytest.raises(DuplicatePortfolioError):
            OpenPortfolioUseCase(_factory(store)).execute(
                OpenPortfolioCommand(owner_id=owner_id)
            )

    def test_negative_cash_rejected(self, store) -> None:
        with pytest.raises(ValidationError):
            OpenPortfolioUseCase(_factory(store)).execute(
                OpenPortfolioCommand(owner_id=uuid.uuid4(), initial_cash=Decimal("-1"))
            )

    def test_cash_beyond_stored_scale_rejected(self, store) -> None:
        with pytest.raises(ValidationError) as excinfo:
            OpenPortfolioUseCase(_factory(store)).execute(
                OpenPortfolioCommand(
                    owner_id=uuid.uuid4(), initial_cash=Decimal("100.000000001")
                )
            )
        assert excinfo.value.field == "initial_cash"


class TestStockCatalogUseCases:
    """Tests for catalog lookup and search."""

    def test_get_stock_case_insensitive(self, store) -> None:
        assert GetStockUseCase(_factory(store)).execute("btc").ticker == "BTC"

    def test_get_unknown_stock(self, store) -> None:
        with pytest.raises(StockNotFoundError):
            GetStockUseCase(_factory(store)).execute("NOPE")

    def test_search_with_type_filter(self, store) -> None:
        results = SearchStocksUseCase(_factory(store)).execute(
            SearchStocksQuery(query="a", asset_type="stock")
        )
        assert [s.ticker for s in results] == ["AAPL"]

    @pytest.mark.parametrize("query,asset_type", [("  ", None), ("btc", "BOND")])
    def test_search_rejects_bad_input(self, store, query, asset_type) -> None:
        with pytest.raises(ValidationError):
            SearchStocksUseCase(_factory(store)).execute(
                SearchStocksQuery(query=query, asset_type=asset_type)
            )
