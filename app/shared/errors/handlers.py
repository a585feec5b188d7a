"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema: ``{code, message}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.trading.errors import (
    CommitOutcomeUnknownError,
    ConcurrentModificationError,
    DuplicatePortfolioError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidStateError,
    NotFoundError,
    TradingDomainError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_503 = 503


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[dict[str, str]] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict = {"code": code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing stock, portfolio or order."""
        logger.warning("Not found: %s", exc.message)
        return _error_response(HTTP_404, exc.code, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation(
        _request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle malformed order fields caught by the domain."""
        logger.warning("Validation failed: %s", exc.message)
        return _error_response(HTTP_422, exc.code, exc.message)

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        """Handle insufficient funds errors."""
        logger.warning("Insufficient funds")
        return _error_response(HTTP_400, exc.code, "Insufficient funds")

    @app.exception_handler(InsufficientHoldingsError)
    async def handle_insufficient_holdings(
        _request: Request, exc: InsufficientHoldingsError
    ) -> JSONResponse:
        """Handle sells larger than the position."""
        logger.warning("Insufficient holdings: %s", exc.ticker)
        return _error_response(HTTP_400, exc.code, "Insufficient holdings")

    @app.exception_handler(InvalidStateError)
    async def handle_invalid_state(
        _request: Request, exc: InvalidStateError
    ) -> JSONResponse:
        """Handle illegal order status transitions."""
        logger.warning("Invalid order state: %s is %s", exc.order_id, exc.status)
        return _error_response(HTTP_400, exc.code, "Cannot cancel this order")

    @app.exception_handler(DuplicatePortfolioError)
    async def handle_duplicate_portfolio(
        _request: Request, exc: DuplicatePortfolioError
    ) -> JSONResponse:
        """Handle a second portfolio for the same owner."""
        logger.warning("Duplicate portfolio for owner %s", exc.owner_id)
        return _error_response(HTTP_409, exc.code, "Portfolio already exists")

    @app.exception_handler(ConcurrentModificationError)
    async def handle_concurrent_modification(
        _request: Request, exc: ConcurrentModificationError
    ) -> JSONResponse:
        """Handle write conflicts that outlasted the retry budget."""
        logger.warning("Concurrent modification: %s", exc.portfolio_id)
        return _error_response(
            HTTP_409, exc.code, "Portfolio is busy, please retry the order"
        )

    @app.exception_handler(CommitOutcomeUnknownError)
    async def handle_outcome_unknown(
        _request: Request, exc: CommitOutcomeUnknownError
    ) -> JSONResponse:
        """Handle a store failure in the middle of a commit."""
        logger.error("Commit outcome unknown: %s", exc.reason)
        return _error_response(
            HTTP_503,
            exc.code,
            "The order may or may not have been recorded; check your order history",
        )

    @app.exception_handler(TradingDomainError)
    async def handle_trading_domain(
        _request: Request, exc: TradingDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled trading domain errors."""
        logger.error("Unhandled trading domain error: %s", exc.message)
        return _error_response(HTTP_500, "INTERNAL_ERROR", "Internal server error")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Reshape pydantic request errors into the common error body."""
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())),
                "message": str(err.get("msg", "")),
            }
            for err in exc.errors()
        ]
        logger.warning("Request validation failed on %d field(s)", len(details))
        return _error_response(
            HTTP_422, "VALIDATION_ERROR", "Validation failed", details
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Keep framework HTTP errors (401, 404 routes) in the same shape."""
        code = {401: "UNAUTHORIZED", 404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}.get(
            exc.status_code, "HTTP_ERROR"
        )
        response = _error_response(exc.status_code, code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "INTERNAL_ERROR", "Internal server error")
