"""
Operator CLI for the trading service.

Usage:
    # Create the trading tables
    python -m app.cli init-db

    # Load the sample instrument catalog
    python -m app.cli seed-stocks

    # Open a portfolio for a new user and print its API token
    python -m app.cli open-account --cash 25000 --label "demo"

    # Issue another token for an existing user
    python -m app.cli issue-token --owner 9b2d...
"""

import argparse
import logging
import sys
import uuid
from decimal import Decimal

from app.application.trading.dtos import OpenPortfolioCommand
from app.application.trading.open_portfolio import OpenPortfolioUseCase
from app.core.config import settings
from app.domain.trading.entities import AssetType, Stock, utcnow
from app.domain.trading.errors import TradingDomainError
from app.infrastructure.trading.database import build_engine, create_schema
from app.infrastructure.trading.identity_repository import ApiTokenIdentityAdapter
from app.infrastructure.trading.stock_catalog_repository import SqlStockCatalog
from app.infrastructure.trading.unit_of_work import SqlTradingUnitOfWork
from app.shared.logging import configure_logging

logger = logging.getLogger(__name__)

# (ticker, name, type, price, previous close, exchange)
SAMPLE_CATALOG = [
    ("BTC", "Bitcoin", AssetType.CRYPTO, "67250.00", "66810.50", None),
    ("ETH", "Ethereum", AssetType.CRYPTO, "3480.25", "3512.00", None),
    ("SOL", "Solana", AssetType.CRYPTO, "152.40", "148.90", None),
    ("AAPL", "Apple Inc.", AssetType.STOCK, "189.84", "187.15", "NASDAQ"),
    ("MSFT", "Microsoft Corporation", AssetType.STOCK, "415.50", "417.20", "NASDAQ"),
    ("TSLA", "Tesla, Inc.", AssetType.STOCK, "176.75", "171.05", "NASDAQ"),
    ("BRK.B", "Berkshire Hathaway Inc. Class B", AssetType.STOCK, "408.10", "406.95", "NYSE"),
    ("GOLD", "Gold Spot", AssetType.COMMODITY, "2331.40", "2325.10", None),
    ("SILVER", "Silver Spot", AssetType.COMMODITY, "27.62", "27.95", None),
]


def _sample_stocks() -> list[Stock]:
    now = utcnow()
    stocks = []
    for ticker, name, asset_type, price, previous, exchange in SAMPLE_CATALOG:
        current = Decimal(price)
        previous_close = Decimal(previous)
        stocks.append(
            Stock(
                ticker=ticker,
                name=name,
                asset_type=asset_type,
                current_price=current,
                previous_close=previous_close,
                day_high=max(current, previous_close),
                day_low=min(current, previous_close),
                exchange=exchange,
                last_updated=now,
            )
        )
    return stocks


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create any missing tables."""
    create_schema(build_engine(args.database_url))


def cmd_seed_stocks(args: argparse.Namespace) -> None:
    """Insert or refresh the sample catalog."""
    engine = build_engine(args.database_url)
    create_schema(engine)
    stocks = _sample_stocks()
    with engine.begin() as conn:
        catalog = SqlStockCatalog(conn)
        for stock in stocks:
            catalog.upsert(stock)
    logger.info("Seeded %d instruments.", len(stocks))


def cmd_open_account(args: argparse.Namespace) -> None:
    """Open a portfolio and print a bearer token for it."""
    engine = build_engine(args.database_url)
    owner_id = uuid.UUID(args.owner) if args.owner else uuid.uuid4()
    use_case = OpenPortfolioUseCase(
        uow_factory=lambda: SqlTradingUnitOfWork(engine),
        starting_cash=settings.starting_cash,
    )
    initial_cash = Decimal(args.cash) if args.cash is not None else None
    try:
        portfolio = use_case.execute(
            OpenPortfolioCommand(owner_id=owner_id, initial_cash=initial_cash)
        )
    except TradingDomainError as exc:
        logger.error("Could not open account: %s", exc.message)
        sys.exit(1)

    token = ApiTokenIdentityAdapter(engine).issue(owner_id, label=args.label)
    print(f"owner_id:  {owner_id}")
    print(f"portfolio: {portfolio.id}")
    print(f"cash:      {portfolio.cash}")
    print(f"token:     {token}")


def cmd_issue_token(args: argparse.Namespace) -> None:
    """Issue an extra bearer token for an existing owner."""
    engine = build_engine(args.database_url)
    token = ApiTokenIdentityAdapter(engine).issue(
        uuid.UUID(args.owner), label=args.label
    )
    print(token)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="SemiCrypto Trading operator CLI")
    parser.add_argument(
        "--database-url",
        default=settings.get_database_url(),
        help="SQLAlchemy URL (defaults to DATABASE_URL / POSTGRES_* settings)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the trading tables")
    init_parser.set_defaults(func=cmd_init_db)

    seed_parser = subparsers.add_parser(
        "seed-stocks", help="Load the sample instrument catalog"
    )
    seed_parser.set_defaults(func=cmd_seed_stocks)

    open_parser = subparsers.add_parser(
        "open-account", help="Open a portfolio and issue its first token"
    )
    open_parser.add_argument("--owner", help="Owner UUID (random when omitted)")
    open_parser.add_argument(
        "--cash", help=f"Starting cash (default {settings.starting_cash})"
    )
    open_parser.add_argument("--label", help="Free-text token label")
    open_parser.set_defaults(func=cmd_open_account)

    token_parser = subparsers.add_parser(
        "issue-token", help="Issue another token for an existing owner"
    )
    token_parser.add_argument("--owner", required=True, help="Owner UUID")
    token_parser.add_argument("--label", help="Free-text token label")
    token_parser.set_defaults(func=cmd_issue_token)

    configure_logging(level=settings.log_level)
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
