"""
Shared pytest fixtures.

The environment is pinned before ``app`` is imported anywhere so the
settings object sees an in-memory database and no rate limiting.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTO_CREATE_SCHEMA"] = "false"

import uuid

import pytest
from fastapi.testclient import TestClient

from app.domain.trading.entities import AssetType
from app.infrastructure.trading.database import build_engine, create_schema
from app.infrastructure.trading.identity_repository import ApiTokenIdentityAdapter
from app.infrastructure.trading.unit_of_work import SqlTradingUnitOfWork
from app.interfaces.trading.dependencies import get_db_engine
from app.main import app
from factories import make_stock, seed_portfolio, seed_stock


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the trading schema."""
    eng = build_engine("sqlite://")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def uow_factory(engine):
    return lambda: SqlTradingUnitOfWork(engine)


@pytest.fixture
def catalog(engine):
    """A small catalog: BTC at 100, ETH at 2000, AAPL at 150."""
    stocks = [
        make_stock("BTC", "100", name="Bitcoin"),
        make_stock("ETH", "2000", name="Ethereum", previous_close="2100"),
        make_stock("AAPL", "150", name="Apple Inc.", asset_type=AssetType.STOCK),
    ]
    for stock in stocks:
        seed_stock(engine, stock)
    return {s.ticker: s for s in stocks}


@pytest.fixture
def client(engine):
    """TestClient bound to the per-test database."""
    app.dependency_overrides[get_db_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def account(engine):
    """An owner with a 10000 cash portfolio and a bearer token."""
    owner_id = uuid.uuid4()
    seed_portfolio(engine, owner_id)
    token = ApiTokenIdentityAdapter(engine).issue(owner_id, label="tests")
    return {
        "owner_id": owner_id,
        "headers": {"Authorization": f"Bearer {token}"},
    }
