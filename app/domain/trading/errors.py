"""
Domain-specific errors for the trading bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class TradingDomainError(Exception):
    """Base error for all trading domain errors."""

    code = "TRADING_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class NotFoundError(TradingDomainError):
    """Base error for any referenced resource that does not exist."""

    code = "NOT_FOUND"


class StockNotFoundError(NotFoundError):
    """Raised when a ticker is not present in the stock catalog."""

    code = "STOCK_NOT_FOUND"

    def __init__(self, ticker: str) -> None:
        super().__init__(f"Stock not found: {ticker}")
        self.ticker = ticker


class PortfolioNotFoundError(NotFoundError):
    """Raised when a portfolio cannot be found."""

    code = "PORTFOLIO_NOT_FOUND"

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"Portfolio not found for owner: {owner_id}")
        self.owner_id = owner_id


class OrderNotFoundError(NotFoundError):
    """Raised when an order does not exist or belongs to another user."""

    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class ValidationError(TradingDomainError):
    """Raised when an order request carries a malformed field."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class InsufficientFundsError(TradingDomainError):
    """Raised when the portfolio lacks cash for a purchase."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, required: str, available: str) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


class InsufficientHoldingsError(TradingDomainError):
    """Raised when selling more units than the portfolio holds."""

    code = "INSUFFICIENT_HOLDINGS"

    def __init__(self, ticker: str, requested: str, held: str) -> None:
        super().__init__(
            f"Insufficient holdings of {ticker}: requested {requested}, held {held}"
        )
        self.ticker = ticker
        self.requested = requested
        self.held = held


class InvalidStateError(TradingDomainError):
    """Raised on an illegal order status transition."""

    code = "INVALID_ORDER_STATUS"

    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(f"Cannot cancel order {order_id} with status {status}")
        self.order_id = order_id
        self.status = status


class DuplicatePortfolioError(TradingDomainError):
    """Raised when opening a second portfolio for the same owner."""

    code = "PORTFOLIO_EXISTS"

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"Portfolio already exists for owner: {owner_id}")
        self.owner_id = owner_id


class ConcurrentModificationError(TradingDomainError):
    """Raised when a portfolio was changed by another writer since it was read."""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, portfolio_id: str) -> None:
        super().__init__(f"Portfolio {portfolio_id} was modified concurrently")
        self.portfolio_id = portfolio_id


class CommitOutcomeUnknownError(TradingDomainError):
    """Raised when the store failed mid-commit and the write may or may not have landed.

    Surfaced to the caller as-is. Use cases must not retry on it.
    """

    code = "OUTCOME_UNKNOWN"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Commit outcome unknown: {reason}")
        self.reason = reason
