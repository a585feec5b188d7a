"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here. No scattered magic strings.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        database_url: Full SQLAlchemy URL. Overrides the postgres_* values.
        auto_create_schema: Create missing tables at startup.
        fee_rate: Proportional trading fee applied to buys and sells.
        starting_cash: Cash credited to a newly opened portfolio.
        order_max_attempts: Tries per order when the portfolio changed underneath.
        top_movers_limit: Size of the top gainers/losers lists.
        rate_limit_enabled: Master switch for slowapi limits.
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_orders: Rate limit for order placement.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "SemiCrypto Trading"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "semicrypto"
    auto_create_schema: bool = True

    fee_rate: Decimal = Decimal("0.001")
    starting_cash: Decimal = Decimal("10000")
    order_max_attempts: int = 3
    top_movers_limit: int = 5

    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_orders: str = "30/minute"

    def get_database_url(self) -> str:
        """Return the effective database URL.

        Priority:
        1. Explicit `DATABASE_URL`
        2. Build a PostgreSQL DSN from postgres_* values (useful for Docker Compose)
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
