"""
Tests for the trading infrastructure adapters.

Runs the SQLAlchemy repositories and unit of work against an
in-memory SQLite database.
"""

import uuid
from decimal import Decimal

import pytest

from app.application.trading.dtos import PlaceOrderCommand
from app.application.trading.place_order import PlaceOrderUseCase
from app.domain.trading.entities import (
    AssetType,
    Holding,
    OrderSide,
    OrderStatus,
)
from app.domain.trading.errors import (
    ConcurrentModificationError,
    DuplicatePortfolioError,
    InsufficientFundsError,
)
from app.domain.trading.order_engine import execute_order
from app.infrastructure.trading.identity_repository import (
    ApiTokenIdentityAdapter,
    hash_token,
)
from app.infrastructure.trading.tables import api_tokens
from factories import make_stock, seed_portfolio, seed_stock


class TestStockCatalogAdapter:
    """Tests for SqlStockCatalog."""

    def test_lookup_is_case_insensitive(self, uow_factory, catalog) -> None:
        with uow_factory() as uow:
            stock = uow.stocks.get_by_ticker("btc")
        assert stock.ticker == "BTC"
        assert stock.current_price == Decimal("100")
        assert stock.asset_type is AssetType.CRYPTO

    def test_unknown_ticker(self, uow_factory, catalog) -> None:
        with uow_factory() as uow:
            assert uow.stocks.get_by_ticker("DOGE") is None

    def test_search_matches_name_and_ticker(self, uow_factory, catalog) -> None:
        with uow_factory() as uow:
            by_name = uow.stocks.search("ether")
            by_ticker = uow.stocks.search("aap")
        assert [s.ticker for s in by_name] == ["ETH"]
        assert [s.ticker for s in by_ticker] == ["AAPL"]

    def test_search_type_filter_and_limit(self, uow_factory, catalog) -> None:
        with uow_factory() as uow:
            crypto = uow.stocks.search("t", asset_type=AssetType.CRYPTO)
            limited = uow.stocks.search("t", limit=1)
        assert [s.ticker for s in crypto] == ["BTC", "ETH"]
        assert len(limited) == 1

    def test_search_escapes_wildcards(self, uow_factory, catalog) -> None:
        with uow_factory() as uow:
            assert uow.stocks.search("%") == []

    def test_upsert_replaces_price(self, engine, uow_factory, catalog) -> None:
        seed_stock(engine, make_stock("BTC", "250", name="Bitcoin"))
        with uow_factory() as uow:
            assert uow.stocks.get_by_ticker("BTC").current_price == Decimal("250")


class TestPortfolioRepositoryAdapter:
    """Tests for PortfolioRepositoryAdapter."""

    def test_round_trip_with_holdings(self, engine, uow_factory) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner, for_update=True)
            portfolio.cash = Decimal("8999")
            portfolio.holdings["BTC"] = Holding(
                ticker="BTC",
                quantity=Decimal("10"),
                average_cost=Decimal("100"),
                current_price=Decimal("100"),
            )
            uow.portfolios.save(portfolio)
            uow.commit()

        with uow_factory() as uow:
            loaded = uow.portfolios.get_by_owner(owner)
        assert loaded.cash == Decimal("8999")
        assert loaded.version == 1
        assert loaded.holding("BTC").quantity == Decimal("10")
        assert loaded.total_value == Decimal("9999")

    def test_missing_owner(self, uow_factory) -> None:
        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(uuid.uuid4()) is None

    def test_duplicate_owner_rejected(self, engine) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)
        with pytest.raises(DuplicatePortfolioError):
            seed_portfolio(engine, owner)

    def test_stale_save_raises(self, engine, uow_factory) -> None:
        """A save from a copy read before another write is refused."""
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        with uow_factory() as uow:
            stale = uow.portfolios.get_by_owner(owner)

        with uow_factory() as uow:
            fresh = uow.portfolios.get_by_owner(owner)
            fresh.cash = Decimal("5000")
            uow.portfolios.save(fresh)
            uow.commit()

        with uow_factory() as uow:
            stale.cash = Decimal("1")
            with pytest.raises(ConcurrentModificationError):
                uow.portfolios.save(stale)

        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).cash == Decimal("5000")

    def test_sold_out_holding_is_deleted(self, engine, uow_factory) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)
        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
            portfolio.holdings["ETH"] = Holding(
                ticker="ETH",
                quantity=Decimal("1"),
                average_cost=Decimal("2000"),
                current_price=Decimal("2000"),
            )
            uow.portfolios.save(portfolio)
            del portfolio.holdings["ETH"]
            uow.portfolios.save(portfolio)
            uow.commit()

        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).holdings == {}


class TestUnitOfWork:
    """Tests for SqlTradingUnitOfWork atomicity."""

    def test_uncommitted_writes_are_rolled_back(self, engine, uow_factory, catalog) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
            order = execute_order(
                portfolio,
                catalog["BTC"],
                OrderSide.BUY,
                Decimal("1"),
                Decimal("100"),
            )
            uow.portfolios.save(portfolio)
            uow.orders.add(order)

        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).cash == Decimal("10000")
            assert uow.orders.get_by_id(order.id) is None

    def test_error_inside_block_rolls_back(self, engine, uow_factory) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        with pytest.raises(RuntimeError):
            with uow_factory() as uow:
                portfolio = uow.portfolios.get_by_owner(owner)
                portfolio.cash = Decimal("0")
                uow.portfolios.save(portfolio)
                raise RuntimeError("boom")

        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).cash == Decimal("10000")


class TestPlaceOrderOnSql:
    """End-to-end order placement through the SQL adapters."""

    def _place(self, uow_factory, owner, side, quantity, price, ticker="BTC"):
        return PlaceOrderUseCase(uow_factory).execute(
            PlaceOrderCommand(
                owner_id=owner,
                ticker=ticker,
                side=side,
                quantity=Decimal(quantity),
                price=Decimal(price),
            )
        )

    def test_buy_buy_sell_scenario(self, engine, uow_factory, catalog) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        self._place(uow_factory, owner, "BUY", "10", "100")
        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).cash == Decimal("8999")

        self._place(uow_factory, owner, "BUY", "5", "200")
        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
        assert portfolio.cash == Decimal("7998")
        assert portfolio.holding("BTC").average_cost.quantize(Decimal("0.01")) == (
            Decimal("133.33")
        )

        self._place(uow_factory, owner, "SELL", "15", "150")
        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
            history = uow.orders.list_by_owner(owner)
            total = uow.orders.count_by_owner(owner)
        assert portfolio.cash == Decimal("10245.75")
        assert portfolio.holdings == {}
        assert portfolio.version == 3
        assert total == 3
        assert [o.side for o in history] == [OrderSide.SELL, OrderSide.BUY, OrderSide.BUY]
        assert all(o.status is OrderStatus.FILLED for o in history)

    def test_fractional_buy_then_sell_removes_holding(
        self, engine, uow_factory, catalog
    ) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        self._place(uow_factory, owner, "BUY", "0.12345678", "100")
        self._place(uow_factory, owner, "SELL", "0.12345678", "100")

        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
        assert portfolio.holdings == {}
        assert portfolio.cash == Decimal("10000") - Decimal("0.02469136")

    def test_fractional_amounts_survive_reload(self, engine, uow_factory, catalog) -> None:
        """What the engine returns is exactly what the store keeps."""
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)

        first = self._place(uow_factory, owner, "BUY", "0.12345678", "100.12345678")
        second = self._place(uow_factory, owner, "BUY", "1.5", "99.99999999")

        with uow_factory() as uow:
            portfolio = uow.portfolios.get_by_owner(owner)
            stored = uow.orders.get_by_id(second.id)

        expected_cash = (
            Decimal("10000") - first.total - first.fee - second.total - second.fee
        )
        expected_quantity = first.quantity + second.quantity
        expected_cost = (
            (first.quantity * first.price + second.quantity * second.price)
            / expected_quantity
        ).quantize(Decimal("0.00000001"))

        assert portfolio.cash == expected_cash
        holding = portfolio.holding("BTC")
        assert holding.quantity == expected_quantity
        assert holding.average_cost == expected_cost
        assert stored.total == second.total
        assert stored.fee == second.fee
        assert stored.quantity == second.quantity
        assert stored.price == second.price

    def test_rejected_order_leaves_no_trace(self, engine, uow_factory, catalog) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner, cash="50")

        with pytest.raises(InsufficientFundsError):
            self._place(uow_factory, owner, "BUY", "1", "100")

        with uow_factory() as uow:
            assert uow.portfolios.get_by_owner(owner).cash == Decimal("50")
            assert uow.orders.count_by_owner(owner) == 0

    def test_order_filters(self, engine, uow_factory, catalog) -> None:
        owner = uuid.uuid4()
        seed_portfolio(engine, owner)
        self._place(uow_factory, owner, "BUY", "2", "100")
        self._place(uow_factory, owner, "SELL", "1", "100")

        with uow_factory() as uow:
            sells = uow.orders.list_by_owner(owner, side=OrderSide.SELL)
            cancelled = uow.orders.count_by_owner(owner, status=OrderStatus.CANCELLED)
            page = uow.orders.list_by_owner(owner, limit=1, offset=1)
        assert [o.side for o in sells] == [OrderSide.SELL]
        assert cancelled == 0
        assert [o.side for o in page] == [OrderSide.BUY]


class TestApiTokenIdentityAdapter:
    """Tests for bearer-token resolution."""

    def test_issue_and_resolve(self, engine) -> None:
        adapter = ApiTokenIdentityAdapter(engine)
        owner = uuid.uuid4()
        token = adapter.issue(owner, label="laptop")
        assert adapter.resolve(token) == owner

    def test_unknown_token(self, engine) -> None:
        assert ApiTokenIdentityAdapter(engine).resolve("not-a-token") is None

    def test_only_digest_is_stored(self, engine) -> None:
        token = ApiTokenIdentityAdapter(engine).issue(uuid.uuid4())
        with engine.connect() as conn:
            stored = conn.execute(api_tokens.select()).fetchall()
        assert [row.token_hash for row in stored] == [hash_token(token)]
        assert all(token not in str(tuple(row)) for row in stored)
